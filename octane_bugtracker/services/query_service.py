"""Octane entity queries: name lists and name-to-id resolution.

Octane filters are written in its textual query language, for example
``name EQ 'Billing' ; parent EQ {name EQ 'Backlog'}``. The helpers below
build such filters; the service sends them and projects the results.

Paging is not handled: queries only return the first page of results,
which is enough for the root/epic/feature lists this integration presents.
"""

import logging
from typing import List, Optional, Dict, Any

from ..config.auth import OctaneTransport
from ..exceptions import ResponseError
from ..models.entity import EntityKind
from ..utils.validators import is_blank

logger = logging.getLogger(__name__)


def quote_literal(value: str) -> str:
    """Quote a value as an Octane string literal, escaping quotes and backslashes."""
    escaped = value.replace('\\', '\\\\').replace("'", "\\'").replace('"', '\\"')
    return f"'{escaped}'"


def name_eq(name: str) -> str:
    return f"name EQ {quote_literal(name)}"


def parent_eq(inner: str) -> str:
    return f"parent EQ {{{inner}}}"


def and_(*clauses: str) -> str:
    return ' ; '.join(clauses)


def root_filter(root_name: str) -> str:
    """Filter matching the work item root with the given name."""
    return name_eq(root_name)


def epic_filter(root_name: str, epic_name: Optional[str] = None) -> str:
    """Filter matching epics under the given root, optionally by name."""
    scope = parent_eq(name_eq(root_name))
    return scope if epic_name is None else and_(name_eq(epic_name), scope)


def feature_filter(root_name: str, epic_name: str, feature_name: Optional[str] = None) -> str:
    """Filter matching features under the given epic and root, optionally by name."""
    scope = parent_eq(and_(name_eq(epic_name), parent_eq(name_eq(root_name))))
    return scope if feature_name is None else and_(name_eq(feature_name), scope)


class OctaneQueryService:
    """Service for querying Octane entities by name."""

    def __init__(self, transport: OctaneTransport):
        """Initialize query service.

        Args:
            transport: Transport used to send the queries
        """
        self.transport = transport

    def _query_entities(self, kind: EntityKind, query: Optional[str], *fields: str) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if not is_blank(query):
            # Octane expects the query expression itself to be double-quoted
            params['query'] = f'"{query}"'
        if fields:
            params['fields'] = ','.join(fields)
        result = self.transport.request('GET', kind.plural, params=params)
        data = result.get('data')
        if not isinstance(data, list):
            raise ResponseError(f"Response for {kind.plural} does not contain a data array")
        return data

    def _project(self, kind: EntityKind, query: Optional[str], field: str) -> List[str]:
        values = []
        for entity in self._query_entities(kind, query, field):
            if not isinstance(entity, dict) or field not in entity:
                raise ResponseError(f"Entity in {kind.plural} response has no '{field}' property")
            values.append(str(entity[field]))
        logger.info("query %s(%s) -> %s: %s", kind.plural, query, field, values)
        return values

    def list_names(self, kind: EntityKind, query: Optional[str] = None) -> List[str]:
        """List names of entities matching the query, in server order.

        Args:
            kind: Entity kind to query
            query: Optional Octane filter expression

        Returns:
            List of entity names
        """
        return self._project(kind, query, 'name')

    def id_for(self, kind: EntityKind, query: str) -> Optional[str]:
        """Get the id of the first entity matching the query.

        If several entities match, the first one returned by Octane wins.

        Returns:
            Entity id, or None if nothing matches
        """
        ids = self._project(kind, query, 'id')
        if len(ids) > 1:
            logger.warning("%d %s match %s, using the first one", len(ids), kind.plural, query)
        return ids[0] if ids else None

    def get_work_item_root_names(self) -> List[str]:
        return self.list_names(EntityKind.WORK_ITEM_ROOT)

    def get_epic_names(self, root_name: Optional[str]) -> List[str]:
        """Get epic names under the given work item root.

        Returns an empty list without querying if no root is given.
        """
        if is_blank(root_name):
            return []
        return self.list_names(EntityKind.EPIC, epic_filter(root_name))

    def get_feature_names(self, root_name: Optional[str], epic_name: Optional[str]) -> List[str]:
        """Get feature names under the given epic and work item root.

        Returns an empty list without querying if root or epic is missing.
        """
        if is_blank(root_name) or is_blank(epic_name):
            return []
        return self.list_names(EntityKind.FEATURE, feature_filter(root_name, epic_name))

    def get_id_for_work_item_root_name(self, root_name: Optional[str]) -> Optional[str]:
        if is_blank(root_name):
            return None
        return self.id_for(EntityKind.WORK_ITEM_ROOT, root_filter(root_name))

    def get_id_for_epic_name(self, root_name: Optional[str], epic_name: Optional[str]) -> Optional[str]:
        if is_blank(root_name) or is_blank(epic_name):
            return None
        return self.id_for(EntityKind.EPIC, epic_filter(root_name, epic_name))

    def get_id_for_feature_name(
        self,
        root_name: Optional[str],
        epic_name: Optional[str],
        feature_name: Optional[str],
    ) -> Optional[str]:
        if is_blank(root_name) or is_blank(epic_name) or is_blank(feature_name):
            return None
        return self.id_for(EntityKind.FEATURE, feature_filter(root_name, epic_name, feature_name))
