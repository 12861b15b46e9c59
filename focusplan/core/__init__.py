"""Core module - domain models, configuration, logging and the scheduler facade."""

from focusplan.core.config import Settings, clear_settings_cache, get_settings
from focusplan.core.exceptions import FocusPlanError, InvalidStatusTransition, InvalidTimeError
from focusplan.core.log import configure_logging
from focusplan.core.models import (
    ItemType,
    PomodoroUnit,
    Preferences,
    Priority,
    ScheduledSlot,
    ScheduleItem,
    ScheduleItemTask,
    SlotStatus,
    Subtask,
    Task,
    WorkingHours,
)
from focusplan.core.timeofday import TimeOfDay, TimeRange

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
    # Errors
    "FocusPlanError",
    "InvalidTimeError",
    "InvalidStatusTransition",
    # Time
    "TimeOfDay",
    "TimeRange",
    # Models
    "Priority",
    "Task",
    "Subtask",
    "SlotStatus",
    "ScheduledSlot",
    "PomodoroUnit",
    "WorkingHours",
    "Preferences",
    "ItemType",
    "ScheduleItem",
    "ScheduleItemTask",
]
