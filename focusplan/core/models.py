"""Pydantic models for the scheduling domain.

This module defines the data structures shared by every FocusPlan
component: priorities, tasks and subtasks, scheduled slots and their
status lifecycle, user preferences and the schedule items handed to
presentation collaborators.
"""

from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from focusplan.core.exceptions import InvalidStatusTransition
from focusplan.core.timeofday import TimeOfDay, TimeRange, naive_local

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


# =============================================================================
# ENUMS
# =============================================================================


class Priority(str, Enum):
    """Eisenhower-matrix priority, ordered from most to least pressing."""

    URGENT_IMPORTANT = "urgent_important"
    IMPORTANT_NOT_URGENT = "important_not_urgent"
    URGENT_NOT_IMPORTANT = "urgent_not_important"
    NOT_URGENT_NOT_IMPORTANT = "not_urgent_not_important"

    @property
    def rank(self) -> int:
        """1 for the most pressing quadrant, 4 for the least."""
        return _PRIORITY_RANKS[self]

    @property
    def max_delay_days(self) -> int:
        """How many days scheduling of this priority may be postponed."""
        return _PRIORITY_MAX_DELAY[self]

    @classmethod
    def from_legacy(cls, value: str | None) -> "Priority":
        """Map the older low/medium/high(/urgent) scale onto the matrix."""
        if value is None:
            return cls.IMPORTANT_NOT_URGENT
        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            pass
        return _LEGACY_PRIORITIES.get(normalized, cls.IMPORTANT_NOT_URGENT)


_PRIORITY_RANKS = {
    Priority.URGENT_IMPORTANT: 1,
    Priority.IMPORTANT_NOT_URGENT: 2,
    Priority.URGENT_NOT_IMPORTANT: 3,
    Priority.NOT_URGENT_NOT_IMPORTANT: 4,
}

_PRIORITY_MAX_DELAY = {
    Priority.URGENT_IMPORTANT: 0,
    Priority.IMPORTANT_NOT_URGENT: 7,
    Priority.URGENT_NOT_IMPORTANT: 1,
    Priority.NOT_URGENT_NOT_IMPORTANT: 30,
}

_LEGACY_PRIORITIES = {
    "urgent": Priority.URGENT_IMPORTANT,
    "high": Priority.URGENT_IMPORTANT,
    "medium": Priority.IMPORTANT_NOT_URGENT,
    "low": Priority.NOT_URGENT_NOT_IMPORTANT,
}


class SlotStatus(str, Enum):
    """Lifecycle of a scheduled slot."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MISSED = "missed"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "SlotStatus") -> bool:
        return target in _SLOT_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not _SLOT_TRANSITIONS[self]


_SLOT_TRANSITIONS: dict[SlotStatus, frozenset[SlotStatus]] = {
    SlotStatus.SCHEDULED: frozenset(
        {SlotStatus.IN_PROGRESS, SlotStatus.MISSED, SlotStatus.CANCELLED}
    ),
    SlotStatus.IN_PROGRESS: frozenset(
        {SlotStatus.COMPLETED, SlotStatus.MISSED, SlotStatus.CANCELLED}
    ),
    SlotStatus.COMPLETED: frozenset(),
    SlotStatus.MISSED: frozenset(),
    SlotStatus.CANCELLED: frozenset(),
}


class ItemType(str, Enum):
    """Kind of entry in a rendered day schedule."""

    POMODORO = "pomodoro"
    BREAK = "break"
    BUFFER = "buffer"


# =============================================================================
# POMODORO UNIT
# =============================================================================


class PomodoroUnit(BaseModel):
    """Length of the scheduler's atomic work quantum."""

    model_config = ConfigDict(frozen=True)

    work_minutes: int = Field(default=25, ge=1)
    break_minutes: int = Field(default=5, ge=0)
    long_break_interval: int = Field(default=4, ge=1)
    long_break_minutes: int = Field(default=15, ge=0)

    @property
    def cycle_minutes(self) -> int:
        """One unit of work followed by its short break."""
        return self.work_minutes + self.break_minutes

    def span_minutes(self, units: int) -> int:
        """Wall-clock minutes for ``units`` consecutive units.

        The last unit in a block never carries a trailing break.
        """
        if units <= 0:
            return 0
        return units * self.work_minutes + (units - 1) * self.break_minutes

    def units_fitting(self, minutes: int) -> int:
        """Largest unit count whose span fits in ``minutes``."""
        if minutes < self.work_minutes:
            return 0
        return (minutes + self.break_minutes) // self.cycle_minutes


# =============================================================================
# TASKS
# =============================================================================


class Subtask(BaseModel):
    """An ordered piece of a decomposed task."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=lambda: str(uuid4()))
    parent_task_id: str
    name: str = Field(min_length=1)
    estimated_units: int = Field(ge=0)
    completed_units: int = Field(default=0, ge=0)
    order: int = Field(ge=1)
    dependencies: list[str] = Field(default_factory=list)
    status: Literal["pending", "in_progress", "completed"] = "pending"

    def is_ready(self, completed_subtasks: set[str]) -> bool:
        """Check if all dependencies are satisfied."""
        return all(dep in completed_subtasks for dep in self.dependencies)


class Task(BaseModel):
    """A unit-estimated piece of work owned by the caller.

    Example:
        >>> task = Task(
        ...     text="Design onboarding flow",
        ...     estimated_units=8,
        ...     priority=Priority.IMPORTANT_NOT_URGENT,
        ... )
        >>> task.remaining_units
        8
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str = Field(..., min_length=1, description="Display text")
    estimated_units: int = Field(..., ge=1, description="Estimated pomodoro units")
    completed_units: int = Field(default=0, ge=0)
    priority: Priority = Field(default=Priority.IMPORTANT_NOT_URGENT)
    deadline: datetime | None = Field(default=None)
    is_subdivided: bool = Field(default=False)
    subtasks: list[Subtask] = Field(default_factory=list)
    project_id: str | None = Field(default=None)

    @field_validator("priority", mode="before")
    @classmethod
    def accept_legacy_priority(cls, v: Any) -> Any:
        """Allow the older low/medium/high strings."""
        if isinstance(v, str) and not isinstance(v, Priority):
            return Priority.from_legacy(v)
        return v

    @field_validator("deadline")
    @classmethod
    def deadline_as_local(cls, v: datetime | None) -> datetime | None:
        """Offset-aware deadlines such as ISO ``...Z`` strings become naive local time."""
        return naive_local(v) if v is not None else None

    @property
    def remaining_units(self) -> int:
        return max(0, self.estimated_units - self.completed_units)


# =============================================================================
# SCHEDULED SLOTS
# =============================================================================


class ScheduledSlot(BaseModel):
    """One placement of one or more consecutive units on a date.

    Slots are immutable; every change produces a new slot via
    ``model_copy`` so callers' snapshots are never mutated.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"slot-{uuid4()}")
    task_id: str
    subtask_id: str | None = None
    date: date
    start: TimeOfDay
    end: TimeOfDay
    unit_count: int = Field(default=1, ge=1)
    status: SlotStatus = SlotStatus.SCHEDULED
    is_flexible: bool = True
    priority: Priority = Priority.IMPORTANT_NOT_URGENT
    actual_start: datetime | None = None
    actual_end: datetime | None = None
    auto_generated: bool = True

    @model_validator(mode="after")
    def check_interval(self) -> "ScheduledSlot":
        if self.end < self.start:
            raise ValueError(f"Slot end {self.end} precedes start {self.start}")
        return self

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start, self.end)

    @property
    def duration_minutes(self) -> int:
        return self.start.minutes_until(self.end)

    @property
    def starts_at(self) -> datetime:
        return self.start.on(self.date)

    @property
    def ends_at(self) -> datetime:
        return self.end.on(self.date)

    @property
    def is_active(self) -> bool:
        """Whether the slot still occupies calendar capacity."""
        return self.status not in (SlotStatus.MISSED, SlotStatus.CANCELLED)

    def moved_to(self, start: TimeOfDay, day: date | None = None) -> "ScheduledSlot":
        """Return a copy starting at ``start`` with the same duration."""
        return self.model_copy(
            update={
                "date": day or self.date,
                "start": start,
                "end": start + self.duration_minutes,
            }
        )

    def advance(self, status: SlotStatus, at: datetime | None = None) -> "ScheduledSlot":
        """Move the slot forward in its lifecycle.

        Raises:
            InvalidStatusTransition: If the move is not allowed.
        """
        if not self.status.can_transition_to(status):
            raise InvalidStatusTransition(
                f"Slot {self.id} cannot move from {self.status.value} to {status.value}"
            )
        update: dict[str, Any] = {"status": status}
        moment = at or datetime.now()
        if status == SlotStatus.IN_PROGRESS:
            update["actual_start"] = moment
        elif status == SlotStatus.COMPLETED:
            update["actual_end"] = moment
        return self.model_copy(update=update)


# =============================================================================
# PREFERENCES
# =============================================================================


class WorkingHours(BaseModel):
    """Daily working window."""

    model_config = ConfigDict(frozen=True)

    start: TimeOfDay = Field(default_factory=lambda: TimeOfDay.of(9))
    end: TimeOfDay = Field(default_factory=lambda: TimeOfDay.of(18))

    @model_validator(mode="after")
    def check_order(self) -> "WorkingHours":
        if self.end <= self.start:
            raise ValueError(f"Working hours end {self.end} must be after start {self.start}")
        return self

    @property
    def window(self) -> TimeRange:
        return TimeRange(self.start, self.end)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


class Preferences(BaseModel):
    """User scheduling preferences.

    Keys may be given in camelCase (``maxPomodorosPerDay``) or snake_case.
    Use ``Preferences.merge`` for partial or untrusted input: unknown or
    malformed fields fall back to the defaults instead of failing.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    available_days: tuple[str, ...] = Field(default=WEEKDAYS[:5])
    max_pomodoros_per_day: int = Field(default=12, ge=1, le=48)
    preferred_batch_size: int = Field(default=3, ge=1)
    buffer_time: int = Field(default=15, ge=0, description="Minutes between unrelated tasks")
    max_sessions_per_day: int = Field(default=12, ge=1)
    min_break_minutes: int = Field(default=5, ge=0)

    @field_validator("available_days", mode="before")
    @classmethod
    def normalize_days(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        days = [str(d).strip().lower() for d in v]
        unknown = [d for d in days if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday names: {unknown}")
        return tuple(d for d in WEEKDAYS if d in days)

    def is_working_day(self, day: date) -> bool:
        return WEEKDAYS[day.weekday()] in self.available_days

    @classmethod
    def merge(
        cls,
        overrides: Mapping[str, Any] | None,
        base: "Preferences | None" = None,
    ) -> "Preferences":
        """Deep-merge ``overrides`` onto ``base`` (or the defaults).

        Each field is validated on its own so one bad value does not
        discard the rest of the overrides.
        """
        base = base or cls()
        if not overrides:
            return base

        names = {}
        for name, info in cls.model_fields.items():
            names[name] = name
            if info.alias:
                names[info.alias] = name

        data = base.model_dump()
        for key, value in overrides.items():
            name = names.get(key)
            if name is None:
                logger.warning(f"Ignoring unknown preference '{key}'")
                continue

            if name == "working_hours" and isinstance(value, Mapping):
                value = {**data["working_hours"], **value}

            candidate = {**data, name: value}
            try:
                cls.model_validate(candidate)
            except ValidationError as e:
                logger.warning(
                    f"Invalid preference '{key}'={value!r}, keeping default: "
                    f"{e.errors()[0]['msg']}"
                )
                continue
            data = candidate

        return cls.model_validate(data)


# =============================================================================
# SCHEDULE ITEMS
# =============================================================================


class ScheduleItemTask(BaseModel):
    """Task reference embedded in a schedule item."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    project_id: str | None = None


class ScheduleItem(BaseModel):
    """Flat entry consumed by presentation and export collaborators."""

    model_config = ConfigDict(frozen=True)

    id: str
    time: TimeOfDay
    task: ScheduleItemTask
    status: SlotStatus = SlotStatus.SCHEDULED
    type: ItemType = ItemType.POMODORO

    def to_dict(self) -> dict[str, Any]:
        """Convert to the external dictionary shape."""
        return {
            "id": self.id,
            "time": str(self.time),
            "task": {
                "id": self.task.id,
                "title": self.task.title,
                "projectId": self.task.project_id,
            },
            "status": self.status.value,
            "type": self.type.value,
        }
