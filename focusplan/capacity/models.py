"""Capacity views, allocation requests and utilization reports."""

from collections.abc import Iterator
from datetime import date, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from focusplan.core.models import WEEKDAYS, Priority, ScheduledSlot, WorkingHours
from focusplan.core.timeofday import TimeOfDay


class DateRange(BaseModel):
    """Inclusive range of calendar dates."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError(f"Date range end {self.end} precedes start {self.start}")
        return self

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def extended(self, days: int) -> "DateRange":
        return DateRange(start=self.start, end=self.end + timedelta(days=days))

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


class TimeBand(str, Enum):
    """Part of the day a slot starts in."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def of(cls, moment: TimeOfDay) -> "TimeBand":
        if moment < TimeOfDay.of(12):
            return cls.MORNING
        if moment < TimeOfDay.of(17):
            return cls.AFTERNOON
        return cls.EVENING


# =============================================================================
# CAPACITY VIEWS
# =============================================================================


class DailyCapacity(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    total_units: int = Field(ge=0)
    available_units: int = Field(ge=0)
    used_units: int = Field(ge=0)
    working_hours: WorkingHours
    overtime_units: int = Field(default=0, ge=0)
    is_working_day: bool = True
    utilization_rate: float = Field(default=0.0, ge=0.0)


class CapacityRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str  # increase, decrease, redistribute, rest
    priority: str  # high, medium, low
    title: str
    description: str


class WeeklyCapacity(BaseModel):
    week_start: date
    week_end: date
    daily: list[DailyCapacity]
    total_units: int
    available_units: int
    used_units: int
    utilization_rate: float
    peak_days: list[date] = Field(default_factory=list)
    light_days: list[date] = Field(default_factory=list)
    average_daily_load: float = 0.0
    load_variance: float = 0.0
    recommendations: list[CapacityRecommendation] = Field(default_factory=list)


class LoadDistribution(BaseModel):
    """Working days counted by load band."""

    light: int = 0
    medium: int = 0
    heavy: int = 0
    overload: int = 0


class MonthlyCapacity(BaseModel):
    year: int
    month: int
    weekly: list[WeeklyCapacity]
    total_units: int
    used_units: int
    working_days: int
    average_daily_capacity: float
    utilization_trend: list[float] = Field(default_factory=list)
    distribution: LoadDistribution = Field(default_factory=LoadDistribution)


# =============================================================================
# ALLOCATION
# =============================================================================


class ConstraintType(str, Enum):
    """How strictly a constraint binds."""

    MUST = "must"  # Never violated
    SHOULD = "should"  # Only relaxed in alternatives
    COULD = "could"  # Scoring penalty only


class ConstraintOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    GE = "ge"
    LE = "le"
    IN = "in"
    BETWEEN = "between"


class ConstraintField(str, Enum):
    DATE = "date"
    WEEKDAY = "weekday"
    START_TIME = "start_time"
    UNITS = "units"


class AllocationConstraint(BaseModel):
    """A condition on a candidate placement."""

    model_config = ConfigDict(frozen=True)

    type: ConstraintType = ConstraintType.MUST
    field: ConstraintField
    operator: ConstraintOperator
    value: Any
    description: str = ""
    penalty: float = Field(default=0.1, ge=0.0, le=1.0)

    def is_satisfied(self, day: date, start: TimeOfDay, units: int) -> bool:
        actual = self._actual(day, start, units)
        expected = self._coerce(self.value)

        match self.operator:
            case ConstraintOperator.EQ:
                return actual == expected
            case ConstraintOperator.NE:
                return actual != expected
            case ConstraintOperator.GT:
                return actual > expected
            case ConstraintOperator.LT:
                return actual < expected
            case ConstraintOperator.GE:
                return actual >= expected
            case ConstraintOperator.LE:
                return actual <= expected
            case ConstraintOperator.IN:
                return actual in expected
            case ConstraintOperator.BETWEEN:
                low, high = expected
                return low <= actual <= high
        return False

    def _actual(self, day: date, start: TimeOfDay, units: int) -> Any:
        if self.field == ConstraintField.DATE:
            return day
        if self.field == ConstraintField.WEEKDAY:
            return WEEKDAYS[day.weekday()]
        if self.field == ConstraintField.START_TIME:
            return start
        return units

    def _coerce(self, value: Any) -> Any:
        """Convert the raw constraint value into the field's type."""
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._coerce(v) for v in value]
        if self.field == ConstraintField.DATE and isinstance(value, str):
            return date.fromisoformat(value)
        if self.field == ConstraintField.WEEKDAY and isinstance(value, str):
            return value.strip().lower()
        if self.field == ConstraintField.START_TIME:
            return TimeOfDay.coerce(value)
        return value


class Flexibility(str, Enum):
    RIGID = "rigid"  # One block on one day
    FLEXIBLE = "flexible"  # Split across days
    ADAPTIVE = "adaptive"  # Split, and accept the best alternative when short


class CapacityAllocationRequest(BaseModel):
    task_id: str
    subtask_id: str | None = None
    required_units: int = Field(ge=1)
    date_range: DateRange
    preferred_date: date | None = None
    constraints: list[AllocationConstraint] = Field(default_factory=list)
    priority: Priority = Priority.IMPORTANT_NOT_URGENT
    flexibility: Flexibility = Flexibility.FLEXIBLE
    preferred_bands: list[TimeBand] = Field(default_factory=list)
    avoid_bands: list[TimeBand] = Field(default_factory=list)
    minimum_block_size: int = Field(default=1, ge=1)


class AlternativeAllocation(BaseModel):
    id: str
    description: str
    slots: list[ScheduledSlot]
    allocated_units: int
    score: float
    tradeoffs: list[str] = Field(default_factory=list)


class CapacityAllocationResult(BaseModel):
    success: bool
    message: str
    slots: list[ScheduledSlot] = Field(default_factory=list)
    requested_units: int
    allocated_units: int
    strategy: str = "primary"
    utilization_impact: float = 0.0
    alternatives: list[AlternativeAllocation] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def delta(self) -> int:
        """Allocated minus requested units (negative when short)."""
        return self.allocated_units - self.requested_units


# =============================================================================
# UTILIZATION ANALYSIS
# =============================================================================


class HealthRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class HealthFlag(str, Enum):
    """Qualitative tags attached to a utilization analysis."""

    # Red flags
    OVERLOADED_DAYS = "overloaded_days"
    SUSTAINED_HIGH_LOAD = "sustained_high_load"
    UNBALANCED_WORKLOAD = "unbalanced_workload"
    HEAVY_EVENING_WORK = "heavy_evening_work"
    # Strengths
    BALANCED_WORKLOAD = "balanced_workload"
    HEALTHY_UTILIZATION = "healthy_utilization"
    MORNING_FOCUS = "morning_focus"


class BandDistribution(BaseModel):
    """Share of scheduled units starting in each part of the day."""

    morning: float = 0.0
    afternoon: float = 0.0
    evening: float = 0.0


class CapacityHealthMetrics(BaseModel):
    overall_health: HealthRating
    workload_balance: float = Field(ge=0.0, le=1.0)
    stress_level: float = Field(ge=0.0, le=1.0)
    sustainability: float = Field(ge=0.0, le=1.0)
    burnout_risk: float = Field(ge=0.0, le=1.0)
    red_flags: list[HealthFlag] = Field(default_factory=list)
    strengths: list[HealthFlag] = Field(default_factory=list)


class CapacityUtilizationAnalysis(BaseModel):
    date_range: DateRange
    overall_utilization: float
    average_daily_utilization: float
    peak_utilization: float
    minimum_utilization: float
    time_distribution: BandDistribution
    health: CapacityHealthMetrics

    @property
    def has_overload(self) -> bool:
        return HealthFlag.OVERLOADED_DAYS in self.health.red_flags


# =============================================================================
# PREDICTION
# =============================================================================


class GapSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"


class DailyDemandPrediction(BaseModel):
    date: date
    predicted_demand: float
    capacity: int
    gap: float  # demand minus capacity


class CapacityGap(BaseModel):
    date: date
    gap_size: float
    severity: GapSeverity
    suggestions: list[str] = Field(default_factory=list)


class CapacityRisk(BaseModel):
    type: str  # overload, underutilization, imbalance
    probability: float = Field(ge=0.0, le=1.0)
    impact: str  # low, medium, high, critical
    description: str
    mitigation: list[str] = Field(default_factory=list)


class CapacityPrediction(BaseModel):
    date_range: DateRange
    daily: list[DailyDemandPrediction]
    gaps: list[CapacityGap] = Field(default_factory=list)
    risks: list[CapacityRisk] = Field(default_factory=list)
    total_demand: float = 0.0
    total_capacity: int = 0
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
