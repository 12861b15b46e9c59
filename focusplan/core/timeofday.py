"""Time-of-day value types with minute granularity.

All "HH:MM" handling in FocusPlan goes through this module:
- TimeOfDay: a wall-clock time stored as minutes since midnight
- TimeRange: a half-open [start, end) interval on a single day
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from focusplan.core.exceptions import InvalidTimeError

MINUTES_PER_DAY = 24 * 60


def naive_local(moment: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local time; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """A wall-clock time, e.g. ``TimeOfDay.parse("09:30")``.

    Arithmetic may run past midnight (an end time of "24:30" is
    representable) so that out-of-window slots can be detected rather
    than silently wrapped.
    """

    minutes: int

    def __post_init__(self) -> None:
        if self.minutes < 0:
            raise InvalidTimeError(f"Time cannot be negative: {self.minutes} minutes")

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """Parse an "HH:MM" string."""
        match = _TIME_PATTERN.match(value)
        if not match:
            raise InvalidTimeError(f"Expected 'HH:MM', got {value!r}")
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours >= 24:
            raise InvalidTimeError(f"Hours out of range in {value!r}")
        if minutes >= 60:
            raise InvalidTimeError(f"Minutes out of range in {value!r}")
        return cls(hours * 60 + minutes)

    @classmethod
    def of(cls, hours: int, minutes: int = 0) -> "TimeOfDay":
        return cls(hours * 60 + minutes)

    @classmethod
    def from_time(cls, value: time) -> "TimeOfDay":
        return cls(value.hour * 60 + value.minute)

    @classmethod
    def coerce(cls, value: Any) -> "TimeOfDay":
        """Accept a TimeOfDay, "HH:MM" string, ``datetime.time`` or minute count."""
        if isinstance(value, TimeOfDay):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, time):
            return cls.from_time(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise InvalidTimeError(f"Cannot interpret {value!r} as a time of day")

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def add_minutes(self, minutes: int) -> "TimeOfDay":
        return TimeOfDay(self.minutes + minutes)

    def minutes_until(self, other: "TimeOfDay") -> int:
        """Signed number of minutes from this time to ``other``."""
        return other.minutes - self.minutes

    def on(self, day: date) -> datetime:
        """Combine with a calendar date into a naive datetime."""
        return datetime.combine(day, time()) + timedelta(minutes=self.minutes)

    def __add__(self, minutes: int) -> "TimeOfDay":
        if not isinstance(minutes, int):
            return NotImplemented
        return self.add_minutes(minutes)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __repr__(self) -> str:
        return f"TimeOfDay({self})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval [start, end) within one day."""

    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidTimeError(f"Range end {self.end} precedes start {self.start}")

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeRange":
        return cls(TimeOfDay.parse(start), TimeOfDay.parse(end))

    @classmethod
    def starting_at(cls, start: TimeOfDay, duration_minutes: int) -> "TimeRange":
        return cls(start, start + duration_minutes)

    @property
    def duration_minutes(self) -> int:
        return self.start.minutes_until(self.end)

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, moment: TimeOfDay) -> bool:
        return self.start <= moment < self.end

    def covers(self, other: "TimeRange") -> bool:
        """True when ``other`` lies entirely inside this range."""
        return self.start <= other.start and other.end <= self.end

    def gap_until(self, other: "TimeRange") -> int:
        """Minutes between this range's end and ``other``'s start (negative if they overlap)."""
        return self.end.minutes_until(other.start)

    def padded(self, minutes: int) -> "TimeRange":
        """Grow the range by ``minutes`` on both sides (clamped at midnight)."""
        return TimeRange(TimeOfDay(max(0, self.start.minutes - minutes)), self.end + minutes)

    def shifted_to(self, start: TimeOfDay) -> "TimeRange":
        return TimeRange.starting_at(start, self.duration_minutes)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"
