import pytest

from octane_bugtracker.exceptions import ResponseError
from octane_bugtracker.models.entity import EntityKind
from octane_bugtracker.services.query_service import (
    OctaneQueryService,
    epic_filter,
    feature_filter,
    quote_literal,
)

EPICS_OF_BACKLOG = "parent EQ {name EQ 'Backlog'}"
FEATURES_OF_BILLING = "parent EQ {name EQ 'Billing' ; parent EQ {name EQ 'Backlog'}}"


@pytest.fixture
def query(transport):
    return OctaneQueryService(transport)


def test_filters():
    assert epic_filter("Backlog") == EPICS_OF_BACKLOG
    assert epic_filter("Backlog", "Billing") == "name EQ 'Billing' ; " + EPICS_OF_BACKLOG
    assert feature_filter("Backlog", "Billing") == FEATURES_OF_BILLING
    assert feature_filter("Backlog", "Billing", "Invoices") == "name EQ 'Invoices' ; " + FEATURES_OF_BILLING


def test_quote_literal_escapes_quotes():
    assert quote_literal("O'Brien") == "'O\\'Brien'"
    assert quote_literal('say "hi"') == "'say \\\"hi\\\"'"
    assert quote_literal("a\\b") == "'a\\\\b'"


def test_root_names_query_has_no_filter(query, transport):
    transport.add_names("work_item_roots", None, ["Backlog", "Release 1"])
    assert query.get_work_item_root_names() == ["Backlog", "Release 1"]
    method, path, params, body = transport.calls[0]
    assert (method, path, body) == ("GET", "work_item_roots", None)
    assert params == {"fields": "name"}


def test_epic_names_query_is_double_quoted(query, transport):
    transport.add_names("epics", EPICS_OF_BACKLOG, ["Billing", "Shipping"])
    assert query.get_epic_names("Backlog") == ["Billing", "Shipping"]
    params = transport.calls[0][2]
    assert params["query"] == f'"{EPICS_OF_BACKLOG}"'


def test_feature_names(query, transport):
    transport.add_names("features", FEATURES_OF_BILLING, ["Invoices"])
    assert query.get_feature_names("Backlog", "Billing") == ["Invoices"]


@pytest.mark.parametrize("root", [None, "", "   "])
def test_blank_scope_returns_empty_without_request(query, transport, root):
    assert query.get_epic_names(root) == []
    assert query.get_feature_names(root, "Billing") == []
    assert query.get_feature_names("Backlog", root) == []
    assert query.get_id_for_work_item_root_name(root) is None
    assert query.get_id_for_epic_name("Backlog", root) is None
    assert transport.calls == []


def test_id_lookup_first_match_wins(query, transport):
    transport.add_ids("epics", "name EQ 'Billing' ; " + EPICS_OF_BACKLOG, ["2001", "2002"])
    assert query.get_id_for_epic_name("Backlog", "Billing") == "2001"
    assert transport.calls[0][2]["fields"] == "id"


def test_id_lookup_without_match_returns_none(query, transport):
    assert query.get_id_for_work_item_root_name("Nowhere") is None


def test_id_lookup_for_feature(query, transport):
    transport.add_ids("features", "name EQ 'Invoices' ; " + FEATURES_OF_BILLING, [3001])
    assert query.get_id_for_feature_name("Backlog", "Billing", "Invoices") == "3001"


def test_missing_data_array_raises_response_error(query, transport):
    transport.responses[("work_item_roots", None, "name")] = {"total_count": 0}
    with pytest.raises(ResponseError):
        query.get_work_item_root_names()


def test_entity_without_projected_field_raises_response_error(query, transport):
    transport.responses[("epics", None, "name")] = {"data": [{"id": "1"}]}
    with pytest.raises(ResponseError):
        query.list_names(EntityKind.EPIC)
