"""Conflict detection and resolution for schedules."""

from focusplan.conflict.actions import (
    AutoResolution,
    IgnoreAction,
    RemoveAction,
    RescheduleAction,
    ResolutionAction,
    ResolutionResult,
    ResolutionStatus,
)
from focusplan.conflict.detector import (
    Conflict,
    ConflictDetector,
    ConflictReport,
    ConflictSeverity,
    ConflictType,
    GapTooSmallConflict,
    OutsideWorkingHoursConflict,
    OverlapConflict,
    TooManySessionsConflict,
    conflict_adapter,
)
from focusplan.conflict.resolver import ConflictResolver

__all__ = [
    # Detection
    "ConflictDetector",
    "ConflictReport",
    "ConflictSeverity",
    "ConflictType",
    "Conflict",
    "OverlapConflict",
    "GapTooSmallConflict",
    "OutsideWorkingHoursConflict",
    "TooManySessionsConflict",
    "conflict_adapter",
    # Resolution
    "ConflictResolver",
    "ResolutionAction",
    "RescheduleAction",
    "RemoveAction",
    "IgnoreAction",
    "ResolutionResult",
    "ResolutionStatus",
    "AutoResolution",
]
