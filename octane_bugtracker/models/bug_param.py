"""Bug parameter data models."""

from pydantic import BaseModel, Field, ConfigDict, TypeAdapter
from typing import Annotated, Dict, Iterator, List, Literal, Optional, Union

from ..exceptions import PreconditionError
from ..utils.formatters import normalize_value


class BugParamBase(BaseModel):
    """Attributes shared by all bug parameter kinds."""

    model_config = ConfigDict(validate_assignment=True)

    identifier: str = Field(..., description="Stable parameter identifier (e.g., ROOT)")
    display_label: str = Field(..., description="Label shown to the user")
    description: Optional[str] = Field(None, description="Help text shown to the user")
    value: Optional[str] = Field(None, description="Current value")
    required: bool = Field(default=False, description="Whether a value must be provided")


class BugParamChoice(BugParamBase):
    """Parameter whose value is picked from a (possibly server-backed) choice list."""

    kind: Literal["choice"] = "choice"
    choice_list: List[str] = Field(default_factory=list, description="Valid values")
    has_dependent_params: bool = Field(default=False, description="Changing this value refreshes other parameters")

    def update_choice_list(self, choices: Optional[List[str]]) -> None:
        """Replace the choice list.

        A single choice is selected automatically; a current value that is no
        longer offered is cleared.
        """
        self.choice_list = list(choices or [])
        if len(self.choice_list) == 1:
            self.value = self.choice_list[0]
        elif self.value is not None and self.value not in self.choice_list:
            self.value = None


class BugParamText(BugParamBase):
    """Single-line free text parameter."""

    kind: Literal["text"] = "text"
    max_length: Optional[int] = Field(None, description="Maximum accepted length")


class BugParamTextArea(BugParamBase):
    """Multi-line free text parameter."""

    kind: Literal["textarea"] = "textarea"


BugParam = Annotated[
    Union[BugParamChoice, BugParamText, BugParamTextArea],
    Field(discriminator="kind"),
]

_BUG_PARAM_LIST = TypeAdapter(List[BugParam])


class BugParams:
    """Ordered set of current bug parameter instances, keyed by identifier."""

    def __init__(self, params: Optional[List[BugParamBase]] = None):
        """Initialize the parameter set.

        Args:
            params: Parameter instances; identifiers must be unique
        """
        self.params: List[BugParamBase] = []
        for param in params or []:
            self.add(param)

    def add(self, param: BugParamBase) -> None:
        if param.identifier in self:
            raise PreconditionError(f"Duplicate bug parameter identifier: {param.identifier}")
        self.params.append(param)

    @classmethod
    def from_dicts(cls, items: List[Dict]) -> "BugParams":
        """Rebuild a parameter set from serialized parameters (e.g. sent back by a UI)."""
        return cls(_BUG_PARAM_LIST.validate_python(items))

    def to_dicts(self) -> List[Dict]:
        return [param.model_dump() for param in self.params]

    def __iter__(self) -> Iterator[BugParamBase]:
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)

    def __contains__(self, identifier: str) -> bool:
        return any(p.identifier == identifier for p in self.params)

    def get(self, identifier: str) -> BugParamBase:
        """Get the parameter with the given identifier."""
        for param in self.params:
            if param.identifier == identifier:
                return param
        raise PreconditionError(f"Unknown bug parameter {identifier}")

    def choice(self, identifier: str) -> BugParamChoice:
        """Get the choice parameter with the given identifier."""
        param = self.get(identifier)
        if not isinstance(param, BugParamChoice):
            raise PreconditionError(
                f"Cannot update choice list for bug parameter type {type(param).__name__}"
            )
        return param

    def value(self, identifier: str) -> Optional[str]:
        """Get the trimmed value of a parameter, None if blank."""
        return normalize_value(self.get(identifier).value)

    def to_values(self) -> Dict[str, Optional[str]]:
        return {param.identifier: param.value for param in self.params}
