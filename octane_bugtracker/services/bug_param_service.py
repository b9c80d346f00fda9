"""Octane bug parameters: definitions, cascading choice lists and submission payload.

The ROOT, EPIC and FEATURE parameters form a dependency chain: the epics
offered depend on the selected root, the features offered depend on the
selected epic and root. Each definition names the parameter to refresh when
its value changes, and BugParamGraph runs those refreshes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Sequence, Set, Tuple, Union, Any

from ..exceptions import PreconditionError
from ..models.bug_param import (
    BugParamBase,
    BugParamChoice,
    BugParams,
    BugParamText,
    BugParamTextArea,
)
from ..models.entity import EntityKind
from ..utils.formatters import abbreviate, normalize_value
from ..utils.validators import is_not_blank
from .query_service import OctaneQueryService

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 254
NEW_DEFECT_PHASE_ID = "phase.defect.new"
DEFAULT_NAME = "Fix $ATTRIBUTE_CATEGORY$ in $ATTRIBUTE_FILE$"
DEFAULT_DESCRIPTION = "Issue Ids: $ATTRIBUTE_INSTANCE_ID$\\n$ISSUE_DEEPLINK$"


class BugParamId(str, Enum):
    """Identifiers of the default Octane bug parameters."""

    TYPE = "TYPE"
    ROOT = "ROOT"
    EPIC = "EPIC"
    FEATURE = "FEATURE"
    NAME = "NAME"
    DESCRIPTION = "DESCRIPTION"


def _create_type(identifier: str) -> BugParamBase:
    return BugParamChoice(identifier=identifier, display_label="Type", choice_list=["Defect"],
                          value="Defect", required=True)


def _create_root(identifier: str) -> BugParamBase:
    return BugParamChoice(identifier=identifier, display_label="Root", required=True)


def _create_epic(identifier: str) -> BugParamBase:
    return BugParamChoice(identifier=identifier, display_label="Epic")


def _create_feature(identifier: str) -> BugParamBase:
    return BugParamChoice(identifier=identifier, display_label="Feature",
                          description="Required when an epic is selected")


def _create_name(identifier: str) -> BugParamBase:
    return BugParamText(identifier=identifier, display_label="Name", max_length=NAME_MAX_LENGTH,
                        required=True, value=DEFAULT_NAME)


def _create_description(identifier: str) -> BugParamBase:
    return BugParamTextArea(identifier=identifier, display_label="Description", required=True,
                            value=DEFAULT_DESCRIPTION)


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a bug parameter and the parameter to refresh when it changes."""

    identifier: BugParamId
    factory: Callable[[str], BugParamBase]
    on_change: Optional[BugParamId] = None

    def create(self) -> BugParamBase:
        """Create a bug parameter instance holding the default values."""
        param = self.factory(self.identifier.value)
        if self.on_change is not None:
            if not isinstance(param, BugParamChoice):
                raise PreconditionError(
                    f"OnChange handler is not supported for {type(param).__name__}"
                )
            param.has_dependent_params = True
        return param


BUG_PARAM_DEFINITIONS: Tuple[FieldDefinition, ...] = (
    FieldDefinition(BugParamId.TYPE, _create_type),
    FieldDefinition(BugParamId.ROOT, _create_root, on_change=BugParamId.EPIC),
    FieldDefinition(BugParamId.EPIC, _create_epic, on_change=BugParamId.FEATURE),
    FieldDefinition(BugParamId.FEATURE, _create_feature),
    FieldDefinition(BugParamId.NAME, _create_name),
    FieldDefinition(BugParamId.DESCRIPTION, _create_description),
)


Refresher = Callable[[OctaneQueryService, BugParams], None]


def refresh_root(query: OctaneQueryService, params: BugParams) -> None:
    root = params.choice(BugParamId.ROOT.value)
    root.required = True
    root.update_choice_list(query.get_work_item_root_names())


def refresh_epic(query: OctaneQueryService, params: BugParams) -> None:
    root_name = params.value(BugParamId.ROOT.value)
    params.choice(BugParamId.EPIC.value).update_choice_list(query.get_epic_names(root_name))


def refresh_feature(query: OctaneQueryService, params: BugParams) -> None:
    root_name = params.value(BugParamId.ROOT.value)
    epic_name = params.value(BugParamId.EPIC.value)
    feature = params.choice(BugParamId.FEATURE.value)
    feature.update_choice_list(query.get_feature_names(root_name, epic_name))
    # Octane does not accept defects directly under an epic
    feature.required = is_not_blank(epic_name)


DEFAULT_REFRESHERS: Dict[str, Refresher] = {
    BugParamId.ROOT.value: refresh_root,
    BugParamId.EPIC.value: refresh_epic,
    BugParamId.FEATURE.value: refresh_feature,
}


class BugParamGraph:
    """Directed graph of choice-list refreshes keyed by parameter identifier.

    Refreshing a parameter runs its refresher and then refreshes the
    parameters depending on it.
    """

    def __init__(self, refreshers: Mapping[str, Refresher], dependents: Mapping[str, Sequence[str]]):
        """Initialize the graph.

        Args:
            refreshers: Choice-list refresh function per parameter identifier
            dependents: Parameters to refresh after a parameter changed
        """
        self.refreshers = dict(refreshers)
        self.dependents = {key: tuple(value) for key, value in dependents.items()}

    @classmethod
    def from_definitions(
        cls,
        definitions: Sequence[FieldDefinition] = BUG_PARAM_DEFINITIONS,
        refreshers: Optional[Mapping[str, Refresher]] = None,
    ) -> "BugParamGraph":
        dependents = {
            d.identifier.value: (d.on_change.value,)
            for d in definitions if d.on_change is not None
        }
        return cls(DEFAULT_REFRESHERS if refreshers is None else refreshers, dependents)

    def refresh(self, query: OctaneQueryService, params: BugParams, identifier: str,
                _seen: Optional[Set[str]] = None) -> None:
        """Refresh the given parameter, then everything depending on it."""
        seen = set() if _seen is None else _seen
        if identifier in seen:
            return
        seen.add(identifier)
        refresher = self.refreshers.get(identifier)
        if refresher is not None:
            logger.debug("Refreshing bug parameter %s", identifier)
            refresher(query, params)
        for dependent in self.dependents.get(identifier, ()):
            self.refresh(query, params, dependent, seen)

    def on_change(self, query: OctaneQueryService, params: BugParams, identifier: str) -> None:
        """Refresh the parameters depending on a changed parameter."""
        seen = {identifier}
        for dependent in self.dependents.get(identifier, ()):
            self.refresh(query, params, dependent, seen)


class OctaneBugParamService:
    """Service for the Octane bug parameters shown when filing a defect."""

    def __init__(
        self,
        definitions: Sequence[FieldDefinition] = BUG_PARAM_DEFINITIONS,
        graph: Optional[BugParamGraph] = None,
    ):
        self.definitions = tuple(definitions)
        self._definitions_by_id = {d.identifier.value: d for d in self.definitions}
        self.graph = graph or BugParamGraph.from_definitions(self.definitions)

    def create_bug_params(self) -> BugParams:
        """Create all bug parameters with their static defaults."""
        return BugParams([definition.create() for definition in self.definitions])

    def get_bug_parameters(self, query: OctaneQueryService) -> BugParams:
        """Create the bug parameters and load the root, epic and feature choices."""
        params = self.create_bug_params()
        self.graph.refresh(query, params, BugParamId.ROOT.value)
        return params

    def on_parameter_change(self, query: OctaneQueryService, changed_param_identifier: str,
                            current_values: BugParams) -> BugParams:
        """Refresh the parameters depending on a changed parameter.

        Args:
            query: Query service for loading choice lists
            changed_param_identifier: Identifier of the changed parameter
            current_values: Current parameters; updated in place

        Returns:
            The same BugParams instance
        """
        if changed_param_identifier not in self._definitions_by_id:
            raise PreconditionError(f"Unknown bug parameter {changed_param_identifier}")
        self.graph.on_change(query, current_values, changed_param_identifier)
        return current_values

    def build_submission(self, query: OctaneQueryService,
                         values: Union[BugParams, Mapping[str, Optional[str]]]) -> Dict[str, Any]:
        """Build the Octane defect contents from the submitted parameter values.

        The defect parent is the selected feature, else the selected epic,
        else the selected root, resolved to its Octane id.

        Returns:
            Defect contents with parent, phase and name, plus the description
            when one is given

        Raises:
            PreconditionError: If no parent is selected, the parent cannot be
            found, or no name is given
        """
        if isinstance(values, BugParams):
            values = values.to_values()

        name = normalize_value(values.get(BugParamId.NAME.value))
        if name is None:
            raise PreconditionError("No name defined for defect")

        contents = {
            "parent": self._get_parent(query, values),
            "phase": EntityKind.PHASE.reference_for(NEW_DEFECT_PHASE_ID),
            "name": abbreviate(name, NAME_MAX_LENGTH),
        }
        description = normalize_value(values.get(BugParamId.DESCRIPTION.value))
        if description is not None:
            contents["description"] = description
        return contents

    def _get_parent(self, query: OctaneQueryService, values: Mapping[str, Optional[str]]) -> Dict[str, str]:
        root_name = normalize_value(values.get(BugParamId.ROOT.value))
        epic_name = normalize_value(values.get(BugParamId.EPIC.value))
        feature_name = normalize_value(values.get(BugParamId.FEATURE.value))

        if feature_name is not None:
            kind, name = EntityKind.FEATURE, feature_name
            parent_id = query.get_id_for_feature_name(root_name, epic_name, feature_name)
        elif epic_name is not None:
            kind, name = EntityKind.EPIC, epic_name
            parent_id = query.get_id_for_epic_name(root_name, epic_name)
        elif root_name is not None:
            kind, name = EntityKind.WORK_ITEM_ROOT, root_name
            parent_id = query.get_id_for_work_item_root_name(root_name)
        else:
            raise PreconditionError("No parent defined for defect")

        if parent_id is None:
            raise PreconditionError(f"Parent {kind.singular} '{name}' not found in Octane")
        return kind.reference_for(parent_id)
