"""Octane defect and phase classification models."""

from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class PhaseStatus(str, Enum):
    """Abstract bug state derived from an Octane phase."""

    OPEN = "open"
    CLOSED = "closed"
    UNCLASSIFIED = "unclassified"


class PhaseClassification(BaseModel):
    """Classification of a single Octane defect phase."""

    model_config = ConfigDict(frozen=True)

    phase_id: str = Field(..., description="Octane phase id (e.g., phase.defect.fixed)")
    status: PhaseStatus
    can_reopen: bool = Field(default=False, description="Closed phase with a defined reopen transition")
    reopen_target: Optional[str] = Field(None, description="Phase id to transition to when reopening")


class Bug(BaseModel):
    """Octane defect as known to the bug tracker host."""

    model_config = ConfigDict(from_attributes=True)

    bug_id: str = Field(..., description="Octane defect id")
    bug_status: Optional[str] = Field(None, description="Current Octane phase id")
