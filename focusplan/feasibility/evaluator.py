"""Feasibility scoring and risk assessment for generated schedules."""

import math
from datetime import datetime, timedelta
from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from focusplan.capacity.models import CapacityUtilizationAnalysis
from focusplan.core.models import ScheduledSlot, Task

MITIGATIONS = (
    "Review progress regularly and adjust the schedule",
    "Keep the task breakdown flexible",
    "Put important work in your most productive hours",
)


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(RiskLevel).index(self)


class RiskFactorType(str, Enum):
    TIGHT_DEADLINE = "tight_deadline"
    HIGH_COMPLEXITY = "high_complexity"
    CAPACITY_OVERLOAD = "capacity_overload"


class RiskFactor(BaseModel):
    type: RiskFactorType
    severity: RiskLevel
    probability: float = Field(ge=0.0, le=1.0)
    impact: str
    description: str


class RiskAssessment(BaseModel):
    overall: RiskLevel = RiskLevel.LOW
    factors: list[RiskFactor] = Field(default_factory=list)
    mitigation: list[str] = Field(default_factory=list)


class FeasibilityReport(BaseModel):
    confidence: float = Field(ge=0.0, le=1.0)
    completion: datetime | None = None
    deadline: datetime
    buffer_days: float | None = None
    risk: RiskAssessment

    @property
    def meets_deadline(self) -> bool:
        return self.completion is not None and self.completion <= self.deadline


class FeasibilityEvaluator:
    """
    Score how likely a schedule is to meet its deadline.

    Example:
        >>> evaluator = FeasibilityEvaluator()
        >>> report = evaluator.evaluate(slots, deadline, task)
        >>> report.confidence
        0.95
    """

    def __init__(self, high_complexity_units: int = 15) -> None:
        self.high_complexity_units = high_complexity_units

    @staticmethod
    def completion_of(
        slots: list[ScheduledSlot],
        unplaced_units: int = 0,
        daily_capacity: int = 12,
    ) -> datetime | None:
        """End of the last slot, pushed back by the days unplaced units still need."""
        if not slots:
            return None
        completion = max(s.ends_at for s in slots)
        if unplaced_units > 0:
            completion += timedelta(days=math.ceil(unplaced_units / max(1, daily_capacity)))
        return completion

    @staticmethod
    def confidence_for(completion: datetime | None, deadline: datetime) -> float:
        if completion is None:
            return 0.0
        if completion > deadline:
            return 0.3
        buffer_days = (deadline - completion) / timedelta(days=1)
        if buffer_days >= 1:
            return 0.95
        if buffer_days >= 0.5:
            return 0.85
        return 0.75

    def evaluate(
        self,
        slots: list[ScheduledSlot],
        deadline: datetime,
        task: Task,
        unplaced_units: int = 0,
        daily_capacity: int = 12,
        utilization: CapacityUtilizationAnalysis | None = None,
    ) -> FeasibilityReport:
        completion = self.completion_of(slots, unplaced_units, daily_capacity)
        confidence = self.confidence_for(completion, deadline)
        buffer_days = None
        if completion is not None:
            buffer_days = (deadline - completion) / timedelta(days=1)

        risk = self.assess_risk(task, buffer_days, utilization)
        logger.info(
            f"Feasibility for '{task.text}': confidence={confidence:.2f}, "
            f"completion={completion}, risk={risk.overall.value}"
        )
        return FeasibilityReport(
            confidence=confidence,
            completion=completion,
            deadline=deadline,
            buffer_days=buffer_days,
            risk=risk,
        )

    def assess_risk(
        self,
        task: Task,
        buffer_days: float | None,
        utilization: CapacityUtilizationAnalysis | None = None,
    ) -> RiskAssessment:
        factors = []

        if buffer_days is None or buffer_days < 0:
            factors.append(
                RiskFactor(
                    type=RiskFactorType.TIGHT_DEADLINE,
                    severity=RiskLevel.HIGH,
                    probability=0.8,
                    impact="The task may not finish on time",
                    description="The schedule runs past the deadline",
                )
            )
        elif buffer_days < 1:
            factors.append(
                RiskFactor(
                    type=RiskFactorType.TIGHT_DEADLINE,
                    severity=RiskLevel.MEDIUM,
                    probability=0.4,
                    impact="Little room for slippage; the plan must be followed closely",
                    description="Less than one day of buffer before the deadline",
                )
            )

        if task.estimated_units > self.high_complexity_units:
            factors.append(
                RiskFactor(
                    type=RiskFactorType.HIGH_COMPLEXITY,
                    severity=RiskLevel.MEDIUM,
                    probability=0.3,
                    impact="May need extra time",
                    description="Large task",
                )
            )

        if utilization is not None and utilization.has_overload:
            factors.append(
                RiskFactor(
                    type=RiskFactorType.CAPACITY_OVERLOAD,
                    severity=RiskLevel.MEDIUM,
                    probability=0.5,
                    impact="Overbooked days leave no room for interruptions",
                    description="Some days in the window are booked beyond capacity",
                )
            )

        overall = max((f.severity for f in factors), key=lambda s: s.rank, default=RiskLevel.LOW)
        return RiskAssessment(overall=overall, factors=factors, mitigation=list(MITIGATIONS))
