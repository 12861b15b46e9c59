"""Slot allocation - turn a strategy into concrete time slots.

The allocator walks candidate days starting tomorrow, decides how many
units each day receives under the chosen strategy, and places one block
per day at the earliest free position of the working window. Every
placement is reserved in the CapacityManager so later days (and later
tasks sharing the manager) see it.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from loguru import logger

from focusplan.capacity.manager import CapacityManager
from focusplan.core.models import PomodoroUnit, Preferences, ScheduledSlot, Subtask, Task
from focusplan.planning.strategy import DistributionStrategy, StrategyType

FRONT_WINDOW_RATIO = 0.7
FRONT_UNITS_RATIO = 0.6
LATE_CAPACITY_RATIO = 0.7


@dataclass
class AllocationOutcome:
    """Slots produced for one task plus how much was left unplaced."""

    slots: list[ScheduledSlot] = field(default_factory=list)
    requested_units: int = 0
    candidate_days: int = 0

    @property
    def placed_units(self) -> int:
        return sum(s.unit_count for s in self.slots)

    @property
    def shortfall(self) -> int:
        return max(0, self.requested_units - self.placed_units)

    @property
    def complete(self) -> bool:
        return self.shortfall == 0

    @property
    def message(self) -> str:
        if self.complete:
            return f"All {self.requested_units} units placed in {len(self.slots)} slot(s)"
        return f"{self.placed_units} of {self.requested_units} units placed"

    def to_dict(self) -> dict:
        return {
            "slots": [s.model_dump(mode="json") for s in self.slots],
            "requested_units": self.requested_units,
            "placed_units": self.placed_units,
            "shortfall": self.shortfall,
            "candidate_days": self.candidate_days,
        }


def _ceil(value: float) -> int:
    # Guard against float noise such as 12 * 0.6 / 3 == 2.4000000000000004
    return math.ceil(round(value, 9))


class SlotAllocator:
    """
    Pack a task's units into per-day slots.

    Usage:
        capacity = CapacityManager(preferences, unit, existing_slots)
        allocator = SlotAllocator(preferences, unit, capacity)
        outcome = allocator.allocate(task, strategy, available_days=5, today=date.today())

        if not outcome.complete:
            # outcome.shortfall units could not be placed
            pass
    """

    def __init__(
        self,
        preferences: Preferences,
        unit: PomodoroUnit,
        capacity: CapacityManager,
    ) -> None:
        self.preferences = preferences
        self.unit = unit
        self.capacity = capacity

    def candidate_days(self, today: date, available_days: int) -> list[date]:
        """Working days from tomorrow through ``available_days`` calendar days."""
        days = (today + timedelta(days=offset) for offset in range(1, available_days + 1))
        return [d for d in days if self.preferences.is_working_day(d)]

    def daily_allocation(
        self,
        strategy_type: StrategyType,
        remaining: int,
        days_left: int,
        index: int,
        front_days: int,
    ) -> int:
        """Units the strategy assigns to the ``index``-th candidate day."""
        cap = self.preferences.max_pomodoros_per_day
        if strategy_type == StrategyType.FRONT_LOADED:
            if index < front_days:
                return min(cap, _ceil(remaining * FRONT_UNITS_RATIO / front_days))
            return min(_ceil(remaining / days_left), _ceil(cap * LATE_CAPACITY_RATIO))
        return min(_ceil(remaining / days_left), cap)

    def allocate(
        self,
        task: Task,
        strategy: DistributionStrategy,
        available_days: int,
        today: date,
        subtasks: Sequence[Subtask] = (),
    ) -> AllocationOutcome:
        candidates = self.candidate_days(today, available_days)
        outcome = AllocationOutcome(
            requested_units=task.remaining_units,
            candidate_days=len(candidates),
        )
        front_days = math.ceil(len(candidates) * FRONT_WINDOW_RATIO)
        padding = self.preferences.buffer_time

        logger.info(
            f"Allocating {task.remaining_units} units of '{task.text}' over "
            f"{len(candidates)} working day(s) with {strategy.type.value} strategy"
        )

        remaining = task.remaining_units
        for index, day in enumerate(candidates):
            if remaining <= 0:
                break

            planned = self.daily_allocation(
                strategy.type, remaining, len(candidates) - index, index, front_days
            )
            planned = min(planned, self.capacity.available_units(day))
            if planned <= 0:
                logger.debug(f"{day}: no capacity left, skipping")
                continue

            start = self.capacity.find_start(day, planned, padding)
            if start is None:
                block = self.capacity.largest_block(day, padding)
                if block is None:
                    logger.debug(f"{day}: no free window, skipping")
                    continue
                start, fitting = block
                logger.debug(f"{day}: only {fitting} of {planned} planned units fit")
                planned = min(planned, fitting)

            slot = ScheduledSlot(
                id=self._slot_id(task.id, index + 1),
                task_id=task.id,
                subtask_id=self._subtask_at(subtasks, outcome.placed_units),
                date=day,
                start=start,
                end=start + self.unit.span_minutes(planned),
                unit_count=planned,
                is_flexible=strategy.parameters.allow_splitting,
                priority=task.priority,
            )
            if not self.capacity.reserve(slot):
                logger.error(f"{day}: could not reserve {slot.id}, skipping")
                continue
            outcome.slots.append(slot)
            remaining -= planned
            logger.debug(f"{day}: placed {planned} unit(s) at {slot.time_range}")

        if outcome.complete:
            logger.info(outcome.message)
        else:
            logger.warning(f"Partial placement for '{task.text}': {outcome.message}")
        return outcome

    def _slot_id(self, task_id: str, day_number: int) -> str:
        """``slot-{task}-{n}``, suffixed until no known slot uses it."""
        base = f"slot-{task_id}-{day_number}"
        slot_id, suffix = base, 1
        while self.capacity.id_taken(slot_id):
            suffix += 1
            slot_id = f"{base}-{suffix}"
        return slot_id

    @staticmethod
    def _subtask_at(subtasks: Sequence[Subtask], offset: int) -> str | None:
        """Subtask that owns the unit at ``offset`` in the task's unit sequence."""
        consumed = 0
        for subtask in sorted(subtasks, key=lambda s: s.order):
            consumed += subtask.estimated_units
            if offset < consumed:
                return subtask.id
        return None
