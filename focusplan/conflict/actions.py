"""Resolution actions and results."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from focusplan.conflict.detector import Conflict
from focusplan.core.models import ScheduledSlot
from focusplan.core.timeofday import TimeOfDay


class RescheduleAction(BaseModel):
    """Move a slot.

    Without an explicit target the conflict's own fix is applied.
    """

    model_config = ConfigDict(frozen=True)

    action: Literal["reschedule"] = "reschedule"
    slot_id: str | None = None
    new_start: TimeOfDay | None = None
    new_date: date | None = None


class RemoveAction(BaseModel):
    """Drop slots; defaults to every slot the conflict affects."""

    model_config = ConfigDict(frozen=True)

    action: Literal["remove"] = "remove"
    slot_ids: list[str] | None = None


class IgnoreAction(BaseModel):
    """Accept the conflict as a known risk."""

    model_config = ConfigDict(frozen=True)

    action: Literal["ignore"] = "ignore"
    reason: str = ""


ResolutionAction = Annotated[
    RescheduleAction | RemoveAction | IgnoreAction,
    Field(discriminator="action"),
]


class ResolutionStatus(str, Enum):
    """Status of a conflict resolution attempt."""

    RESOLVED = "resolved"
    FAILED = "failed"
    IGNORED = "ignored"
    SKIPPED = "skipped"


@dataclass
class ResolutionResult:
    """Result of applying one action to one conflict."""

    conflict_id: str
    status: ResolutionStatus
    action: str
    slots: list[ScheduledSlot] = field(default_factory=list)
    actions_taken: list[str] = field(default_factory=list)
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (ResolutionStatus.RESOLVED, ResolutionStatus.IGNORED)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "conflict_id": self.conflict_id,
            "status": self.status.value,
            "action": self.action,
            "slots": [s.model_dump(mode="json") for s in self.slots],
            "actions_taken": self.actions_taken,
            "error_message": self.error_message,
        }


@dataclass
class AutoResolution:
    """Outcome of repeated detect-and-fix passes."""

    slots: list[ScheduledSlot]
    results: list[ResolutionResult] = field(default_factory=list)
    unresolved: list[Conflict] = field(default_factory=list)
    passes: int = 0

    @property
    def is_clean(self) -> bool:
        return not self.unresolved

    def to_dict(self) -> dict:
        return {
            "slots": [s.model_dump(mode="json") for s in self.slots],
            "results": [r.to_dict() for r in self.results],
            "unresolved": [c.model_dump(mode="json") for c in self.unresolved],
            "passes": self.passes,
        }
