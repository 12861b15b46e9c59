"""
Conflict Detection for FocusPlan schedules

Scans a list of scheduled slots for timing violations:
- Overlaps (adjacent slots on the same date intersect)
- Undersized breaks (positive gap shorter than the minimum break)
- Working-hour violations (slot starts before or ends after the window)
- Session overload (too many slots on one date)
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Annotated, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from focusplan.core.models import PomodoroUnit, Preferences, ScheduledSlot, WorkingHours
from focusplan.core.timeofday import TimeOfDay


class ConflictType(str, Enum):
    """Types of timing conflicts in a schedule."""

    OVERLAP = "overlap"  # Two slots intersect
    GAP_TOO_SMALL = "gap_too_small"  # Break shorter than the minimum
    OUTSIDE_WORKING_HOURS = "outside_working_hours"  # Slot leaves the window
    TOO_MANY_SESSIONS = "too_many_sessions"  # Daily session cap exceeded


class ConflictSeverity(str, Enum):
    """Severity levels for detected conflicts."""

    CRITICAL = "critical"  # Schedule is impossible to follow
    HIGH = "high"  # Violates a hard preference
    MEDIUM = "medium"  # Uncomfortable but workable
    LOW = "low"  # Informational

    @property
    def rank(self) -> int:
        """0 for the most severe level."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [
    ConflictSeverity.CRITICAL,
    ConflictSeverity.HIGH,
    ConflictSeverity.MEDIUM,
    ConflictSeverity.LOW,
]


# =============================================================================
# CONFLICT VARIANTS
# =============================================================================


class _ConflictBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    severity: ConflictSeverity
    description: str
    affected_slot_ids: list[str]
    suggested_resolution: str
    auto_fixable: bool


class OverlapConflict(_ConflictBase):
    type: Literal["overlap"] = "overlap"
    date: date
    earlier_slot_id: str
    later_slot_id: str
    overlap_minutes: int


class GapTooSmallConflict(_ConflictBase):
    type: Literal["gap_too_small"] = "gap_too_small"
    date: date
    earlier_slot_id: str
    later_slot_id: str
    gap_minutes: int
    required_minutes: int

    @property
    def shortfall_minutes(self) -> int:
        return self.required_minutes - self.gap_minutes


class OutsideWorkingHoursConflict(_ConflictBase):
    type: Literal["outside_working_hours"] = "outside_working_hours"
    date: date
    slot_id: str
    window_start: TimeOfDay
    window_end: TimeOfDay


class TooManySessionsConflict(_ConflictBase):
    type: Literal["too_many_sessions"] = "too_many_sessions"
    date: date
    session_count: int
    max_sessions: int


Conflict = Annotated[
    OverlapConflict | GapTooSmallConflict | OutsideWorkingHoursConflict | TooManySessionsConflict,
    Field(discriminator="type"),
]

conflict_adapter: TypeAdapter[Conflict] = TypeAdapter(Conflict)


# =============================================================================
# REPORT
# =============================================================================


@dataclass
class ConflictReport:
    """Complete conflict analysis report."""

    total_conflicts: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    conflicts: list[Conflict] = field(default_factory=list)

    def add_conflict(self, conflict: Conflict):
        """Add a conflict to the report."""
        self.conflicts.append(conflict)
        self.total_conflicts += 1

        if conflict.severity == ConflictSeverity.CRITICAL:
            self.critical_count += 1
        elif conflict.severity == ConflictSeverity.HIGH:
            self.high_count += 1
        elif conflict.severity == ConflictSeverity.MEDIUM:
            self.medium_count += 1
        else:
            self.low_count += 1

    @property
    def is_clean(self) -> bool:
        return self.total_conflicts == 0

    def ordered(self) -> list[Conflict]:
        """Conflicts grouped critical -> high -> medium -> low, detection order within a group."""
        return sorted(self.conflicts, key=lambda c: c.severity.rank)

    def get_by_type(self, conflict_type: ConflictType) -> list[Conflict]:
        """Get conflicts by type."""
        return [c for c in self.conflicts if c.type == conflict_type]

    def get_auto_fixable(self) -> list[Conflict]:
        """Get auto-fixable conflicts in severity order."""
        return [c for c in self.ordered() if c.auto_fixable]

    def get_by_severity(self, severity: ConflictSeverity) -> list[Conflict]:
        """Get conflicts by severity."""
        return [c for c in self.conflicts if c.severity == severity]

    def to_dict(self) -> dict:
        """Convert report to dictionary."""
        return {
            "total_conflicts": self.total_conflicts,
            "critical_count": self.critical_count,
            "high_count": self.high_count,
            "medium_count": self.medium_count,
            "low_count": self.low_count,
            "conflicts": [c.model_dump(mode="json") for c in self.ordered()],
        }


# =============================================================================
# DETECTOR
# =============================================================================


class ConflictDetector:
    """
    Detects timing conflicts in a schedule.

    Usage:
        detector = ConflictDetector.from_preferences(preferences)
        report = detector.detect(slots)

        for conflict in report.get_auto_fixable():
            # Hand to ConflictResolver
            pass
    """

    def __init__(
        self,
        working_hours: WorkingHours | None = None,
        min_break_minutes: int = 5,
        max_sessions_per_day: int = 12,
        unit_break_minutes: int = 5,
    ):
        self.working_hours = working_hours or WorkingHours()
        self.min_break_minutes = min_break_minutes
        self.max_sessions_per_day = max_sessions_per_day
        # Spacing the resolver puts after an overlapped slot
        self.unit_break_minutes = unit_break_minutes

    @classmethod
    def from_preferences(
        cls, preferences: Preferences, unit: PomodoroUnit | None = None
    ) -> "ConflictDetector":
        return cls(
            working_hours=preferences.working_hours,
            min_break_minutes=preferences.min_break_minutes,
            max_sessions_per_day=preferences.max_sessions_per_day,
            unit_break_minutes=(unit or PomodoroUnit()).break_minutes,
        )

    def detect(self, slots: Iterable[ScheduledSlot]) -> ConflictReport:
        """
        Analyze slots for conflicts.

        Cancelled and missed slots no longer occupy time and are ignored.

        Args:
            slots: Slots in any order, possibly spanning several dates

        Returns:
            ConflictReport with all detected conflicts
        """
        by_date: dict[date, list[ScheduledSlot]] = defaultdict(list)
        for slot in slots:
            if slot.is_active:
                by_date[slot.date].append(slot)

        logger.debug(
            f"Checking {sum(len(v) for v in by_date.values())} slots on {len(by_date)} date(s)"
        )
        report = ConflictReport()

        for day in sorted(by_date):
            day_slots = sorted(by_date[day], key=lambda s: (s.start, s.end, s.id))
            self._detect_adjacent(day, day_slots, report)
            self._detect_outside_hours(day, day_slots, report)
            self._detect_session_overload(day, day_slots, report)

        if report.total_conflicts:
            logger.info(
                f"Conflict analysis complete: {report.total_conflicts} conflicts "
                f"({report.critical_count} critical, {report.high_count} high, "
                f"{report.medium_count} medium, {report.low_count} low)"
            )
        return report

    def _detect_adjacent(self, day: date, slots: list[ScheduledSlot], report: ConflictReport):
        """Overlap and break checks between neighbouring slots."""
        for current, following in zip(slots, slots[1:]):
            gap = current.time_range.gap_until(following.time_range)

            if gap < 0:
                report.add_conflict(
                    OverlapConflict(
                        id=f"overlap_{current.id}_{following.id}",
                        severity=ConflictSeverity.CRITICAL,
                        description=(
                            f"{current.time_range} and {following.time_range} overlap "
                            f"on {day} by {-gap} minutes"
                        ),
                        affected_slot_ids=[current.id, following.id],
                        suggested_resolution=(
                            f"Move the later slot to {current.end + self.unit_break_minutes}"
                        ),
                        auto_fixable=True,
                        date=day,
                        earlier_slot_id=current.id,
                        later_slot_id=following.id,
                        overlap_minutes=-gap,
                    )
                )
            elif 0 < gap < self.min_break_minutes:
                shortfall = self.min_break_minutes - gap
                report.add_conflict(
                    GapTooSmallConflict(
                        id=f"break_{current.id}_{following.id}",
                        severity=ConflictSeverity.MEDIUM,
                        description=(
                            f"Only {gap} minutes of break between {current.time_range} "
                            f"and {following.time_range} on {day}"
                        ),
                        affected_slot_ids=[current.id, following.id],
                        suggested_resolution=(
                            f"Delay the later slot or extend the break by {shortfall} minutes"
                        ),
                        auto_fixable=True,
                        date=day,
                        earlier_slot_id=current.id,
                        later_slot_id=following.id,
                        gap_minutes=gap,
                        required_minutes=self.min_break_minutes,
                    )
                )

    def _detect_outside_hours(self, day: date, slots: list[ScheduledSlot], report: ConflictReport):
        window = self.working_hours.window
        for slot in slots:
            if window.covers(slot.time_range):
                continue
            report.add_conflict(
                OutsideWorkingHoursConflict(
                    id=f"hours_{slot.id}",
                    severity=ConflictSeverity.HIGH,
                    description=f"{slot.time_range} on {day} is outside working hours {window}",
                    affected_slot_ids=[slot.id],
                    suggested_resolution="Move the slot inside working hours",
                    auto_fixable=True,
                    date=day,
                    slot_id=slot.id,
                    window_start=window.start,
                    window_end=window.end,
                )
            )

    def _detect_session_overload(
        self, day: date, slots: list[ScheduledSlot], report: ConflictReport
    ):
        if len(slots) <= self.max_sessions_per_day:
            return
        report.add_conflict(
            TooManySessionsConflict(
                id=f"sessions_{day.isoformat()}",
                severity=ConflictSeverity.MEDIUM,
                description=(
                    f"{len(slots)} sessions on {day} exceed the limit of {self.max_sessions_per_day}"
                ),
                affected_slot_ids=[s.id for s in slots],
                suggested_resolution="Move some sessions to other days",
                auto_fixable=False,
                date=day,
                session_count=len(slots),
                max_sessions=self.max_sessions_per_day,
            )
        )
