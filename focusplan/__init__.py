"""
FocusPlan - deadline-driven pomodoro scheduling.

Turns unit-estimated tasks into non-overlapping calendar slots, with
decomposition, conflict resolution, capacity tracking and feasibility scoring.
"""

__version__ = "0.1.0"
__author__ = "FocusPlan Team"

from focusplan.core.scheduler import PomodoroScheduler

__all__ = ["PomodoroScheduler", "__version__"]
