"""Result objects returned by the scheduling pipeline."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from focusplan.conflict.detector import Conflict
from focusplan.core.models import ScheduledSlot, Subtask
from focusplan.decomposition.complexity import TaskComplexity
from focusplan.feasibility.evaluator import RiskAssessment
from focusplan.planning.strategy import DistributionStrategy


class AlternativeSchedule(BaseModel):
    """The same task scheduled under a different strategy."""

    strategy: DistributionStrategy
    slots: list[ScheduledSlot] = Field(default_factory=list)
    placed_units: int = 0
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    description: str = ""


class SchedulingResult(BaseModel):
    """Outcome of scheduling one task.

    ``success`` is False for ineligible tasks and partial placements; in
    both cases ``message`` explains why and ``slots`` holds whatever was
    placed.
    """

    success: bool
    message: str
    task_id: str
    slots: list[ScheduledSlot] = Field(default_factory=list)
    suggested_subtasks: list[Subtask] = Field(default_factory=list)
    strategy: DistributionStrategy
    complexity: TaskComplexity
    estimated_completion: datetime | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    feasibility: float = Field(default=0.0, ge=0.0, le=1.0)
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment)
    conflicts: list[Conflict] = Field(default_factory=list)
    alternatives: list[AlternativeSchedule] = Field(default_factory=list)
    requested_units: int = 0
    placed_units: int = 0
    generated_at: datetime = Field(default_factory=datetime.now)
    generated_by: str = "system"

    @property
    def unplaced_units(self) -> int:
        return max(0, self.requested_units - self.placed_units)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dictionary."""
        return self.model_dump(mode="json")


class DurationEstimate(BaseModel):
    """Rough effort for a batch of tasks."""

    total_units: int
    estimated_minutes: int
    estimated_days: int
