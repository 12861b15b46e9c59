"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Generator
from datetime import date, datetime

import pytest

# Set test environment
os.environ.setdefault("FOCUSPLAN_LOG_LEVEL", "DEBUG")

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
WEDNESDAY = date(2026, 10, 21)


@pytest.fixture(autouse=True)
def clean_settings() -> Generator:
    """Isolate every test from cached settings."""
    from focusplan.core.config import clear_settings_cache

    clear_settings_cache()

    yield

    clear_settings_cache()


@pytest.fixture
def now() -> datetime:
    """Monday 2026-10-19 08:00, the reference time for every scenario."""
    return datetime(2026, 10, 19, 8, 0)


@pytest.fixture
def preferences():
    """Default preferences."""
    from focusplan.core.models import Preferences

    return Preferences()


@pytest.fixture
def six_a_day():
    """Preferences capped at six pomodoros per day."""
    from focusplan.core.models import Preferences

    return Preferences.merge({"maxPomodorosPerDay": 6})


@pytest.fixture
def make_slot() -> Callable:
    """Factory for scheduled slots; the end defaults to a single 25-minute unit."""
    from focusplan.core.models import ScheduledSlot, SlotStatus
    from focusplan.core.timeofday import TimeOfDay

    def _make(
        slot_id: str,
        start: str,
        end: str | None = None,
        day: date = TUESDAY,
        task_id: str = "task-1",
        units: int = 1,
        status: SlotStatus = SlotStatus.SCHEDULED,
    ) -> ScheduledSlot:
        begin = TimeOfDay.parse(start)
        return ScheduledSlot(
            id=slot_id,
            task_id=task_id,
            date=day,
            start=begin,
            end=TimeOfDay.parse(end) if end else begin + 25,
            unit_count=units,
            status=status,
        )

    return _make


# Markers
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
