"""
PomodoroScheduler - the scheduling pipeline facade.

Runs one task through every stage:
1. Complexity analysis
2. Subtask decomposition
3. Strategy selection
4. Slot allocation against capacity
5. Conflict detection and auto-resolution
6. Feasibility and risk evaluation

The scheduler holds preferences and configuration only. The existing-slot
snapshot is passed to every call; nothing is cached between calls.
"""

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta
from typing import Any

from loguru import logger

from focusplan.capacity.manager import CapacityManager
from focusplan.conflict.actions import AutoResolution
from focusplan.conflict.detector import ConflictDetector, ConflictReport
from focusplan.conflict.resolver import ConflictResolver
from focusplan.core.config import Settings, get_settings
from focusplan.core.exceptions import FocusPlanError
from focusplan.core.models import (
    ItemType,
    PomodoroUnit,
    Preferences,
    Priority,
    ScheduledSlot,
    ScheduleItem,
    ScheduleItemTask,
    Task,
)
from focusplan.core.results import AlternativeSchedule, DurationEstimate, SchedulingResult
from focusplan.core.timeofday import TimeRange, naive_local
from focusplan.decomposition.classifier import TaskTypeClassifier
from focusplan.decomposition.complexity import ComplexityAnalyzer, TaskComplexity
from focusplan.decomposition.decomposer import SubtaskDecomposer
from focusplan.feasibility.evaluator import FeasibilityEvaluator
from focusplan.planning.allocator import SlotAllocator
from focusplan.planning.strategy import StrategySelector, StrategyType, default_strategy

Eligibility = Callable[[Task], bool]

ALTERNATIVE_CONFIDENCE_THRESHOLD = 0.85


def priority_eligibility(priorities: Iterable[str | Priority]) -> Eligibility:
    """Eligibility rule that admits tasks whose priority is in ``priorities``."""
    allowed: set[Priority] = set()
    for value in priorities:
        try:
            allowed.add(Priority(value))
        except ValueError:
            logger.warning(f"Ignoring unknown auto-schedule priority '{value}'")

    def is_eligible(task: Task) -> bool:
        return task.priority in allowed

    return is_eligible


class PomodoroScheduler:
    """
    Deadline-driven scheduler for pomodoro-estimated tasks.

    Example:
        >>> scheduler = PomodoroScheduler(Preferences.merge({"maxPomodorosPerDay": 6}))
        >>> result = scheduler.schedule_task(
        ...     Task(text="Write report", estimated_units=4),
        ...     deadline=datetime(2026, 10, 29, 8, 0),
        ...     now=datetime(2026, 10, 19, 8, 0),
        ... )
        >>> result.strategy.type, len(result.slots), result.confidence
        (<StrategyType.EVEN: 'even'>, 4, 0.95)
    """

    def __init__(
        self,
        preferences: Preferences | None = None,
        unit: PomodoroUnit | None = None,
        settings: Settings | None = None,
        eligibility: Eligibility | None = None,
        classifier: TaskTypeClassifier | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.preferences = preferences or Preferences()
        self.unit = unit or PomodoroUnit(
            work_minutes=self.settings.focusplan_unit_work_minutes,
            break_minutes=self.settings.focusplan_unit_break_minutes,
        )
        self.eligibility = eligibility or priority_eligibility(
            self.settings.focusplan_auto_schedule_priorities
        )
        self._classifier = classifier

        self.analyzer = ComplexityAnalyzer()
        self.decomposer = SubtaskDecomposer(
            threshold=self.settings.focusplan_decomposition_threshold,
            classifier=classifier,
        )
        self.selector = StrategySelector()
        self.evaluator = FeasibilityEvaluator(
            high_complexity_units=self.settings.focusplan_high_complexity_units
        )
        self.detector = ConflictDetector.from_preferences(self.preferences, self.unit)
        self.resolver = ConflictResolver(self.detector, self.unit)

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    def schedule_task(
        self,
        task: Task,
        deadline: datetime | None = None,
        existing_slots: Sequence[ScheduledSlot] = (),
        now: datetime | None = None,
    ) -> SchedulingResult:
        """
        Run the full pipeline for one task.

        Args:
            task: Task to schedule
            deadline: Completion deadline; defaults to the task's own or the search window
            existing_slots: Current schedule snapshot to avoid
            now: Reference time; slots start the day after

        Returns:
            SchedulingResult, never raises
        """
        now = naive_local(now) if now else datetime.now()
        deadline = naive_local(deadline or task.deadline or self._window_end(now))

        try:
            return self._schedule(task, deadline, list(existing_slots), now)
        except (FocusPlanError, ValueError) as e:
            logger.error(f"Scheduling '{task.text}' failed: {e}")
            return SchedulingResult(
                success=False,
                message=f"Scheduling failed: {e}",
                task_id=task.id,
                strategy=default_strategy(),
                complexity=TaskComplexity.empty(),
                requested_units=task.remaining_units,
                generated_at=now,
            )

    def schedule_todo(
        self,
        task: Task,
        existing_slots: Sequence[ScheduledSlot] = (),
        now: datetime | None = None,
    ) -> SchedulingResult:
        """Schedule against the task's own deadline, or the search window without one."""
        now = naive_local(now) if now else datetime.now()
        return self.schedule_task(task, task.deadline or self._window_end(now), existing_slots, now)

    def schedule_todos(
        self,
        tasks: Iterable[Task],
        existing_slots: Sequence[ScheduledSlot] = (),
        now: datetime | None = None,
    ) -> list[SchedulingResult]:
        """
        Schedule tasks one at a time in priority order.

        Each task sees the slots placed for the tasks before it.
        """
        now = naive_local(now) if now else datetime.now()
        ordered = sorted(tasks, key=lambda t: t.priority.rank)
        snapshot = list(existing_slots)
        results = []

        logger.info(f"Batch scheduling {len(ordered)} task(s)")
        for task in ordered:
            result = self.schedule_todo(task, snapshot, now)
            snapshot.extend(result.slots)
            results.append(result)

        placed = sum(1 for r in results if r.success)
        logger.info(f"Batch complete: {placed}/{len(results)} task(s) fully scheduled")
        return results

    def _schedule(
        self,
        task: Task,
        deadline: datetime,
        existing_slots: list[ScheduledSlot],
        now: datetime,
    ) -> SchedulingResult:
        logger.info(
            f"Scheduling '{task.text}' ({task.remaining_units} units, "
            f"{task.priority.value}) before {deadline:%Y-%m-%d %H:%M}"
        )
        complexity = self.analyzer.analyze(task)

        if task.remaining_units == 0:
            logger.info(f"'{task.text}' has no remaining units")
            return SchedulingResult(
                success=True,
                message=f"Task '{task.text}' is already complete",
                task_id=task.id,
                strategy=default_strategy(),
                complexity=complexity,
                confidence=1.0,
                feasibility=1.0,
                generated_at=now,
            )

        if not self.eligibility(task):
            logger.info(f"'{task.text}' is not eligible for automatic scheduling")
            return SchedulingResult(
                success=False,
                message=(
                    f"Task '{task.text}' with priority {task.priority.value} "
                    "is not eligible for automatic scheduling"
                ),
                task_id=task.id,
                strategy=default_strategy(),
                complexity=complexity,
                requested_units=task.remaining_units,
                generated_at=now,
            )

        subtasks = self.decomposer.decompose(task)
        available_days = self.available_days(now, deadline)
        daily_capacity = self.preferences.max_pomodoros_per_day
        strategy = self.selector.select(task, available_days, daily_capacity)

        capacity = CapacityManager(self.preferences, self.unit, existing_slots)
        allocator = SlotAllocator(self.preferences, self.unit, capacity)
        outcome = allocator.allocate(
            task, strategy, available_days, now.date(), subtasks or task.subtasks
        )

        new_ids = {s.id for s in outcome.slots}
        new_dates = {s.date for s in outcome.slots}
        context = [s for s in existing_slots if s.date in new_dates]
        resolution = self.resolver.resolve_all(
            context + outcome.slots, fixed={s.id for s in context}
        )
        slots = [s for s in resolution.slots if s.id in new_ids]
        conflicts = [c for c in resolution.unresolved if new_ids.intersection(c.affected_slot_ids)]

        utilization = None
        if slots:
            utilization = capacity.analyze_utilization(min(new_dates), max(new_dates))
        feasibility = self.evaluator.evaluate(
            slots,
            deadline,
            task,
            unplaced_units=outcome.shortfall,
            daily_capacity=daily_capacity,
            utilization=utilization,
        )

        alternatives = []
        if not outcome.complete or feasibility.confidence < ALTERNATIVE_CONFIDENCE_THRESHOLD:
            alternatives.append(
                self._alternative(task, strategy.type.other, deadline, existing_slots, now)
            )

        if outcome.complete:
            message = (
                f"Scheduled '{task.text}' in {len(slots)} slot(s) "
                f"within {available_days} day(s)"
            )
        else:
            message = f"{outcome.message} for '{task.text}' before the deadline"

        return SchedulingResult(
            success=outcome.complete,
            message=message,
            task_id=task.id,
            slots=slots,
            suggested_subtasks=subtasks,
            strategy=strategy,
            complexity=complexity,
            estimated_completion=feasibility.completion,
            confidence=feasibility.confidence,
            feasibility=feasibility.confidence,
            risk_assessment=feasibility.risk,
            conflicts=conflicts,
            alternatives=alternatives,
            requested_units=outcome.requested_units,
            placed_units=outcome.placed_units,
            generated_at=now,
        )

    def _alternative(
        self,
        task: Task,
        strategy_type: StrategyType,
        deadline: datetime,
        existing_slots: list[ScheduledSlot],
        now: datetime,
    ) -> AlternativeSchedule:
        available_days = self.available_days(now, deadline)
        strategy = self.selector.build(
            strategy_type, self.preferences.max_pomodoros_per_day, available_days
        )
        capacity = CapacityManager(self.preferences, self.unit, existing_slots)
        outcome = SlotAllocator(self.preferences, self.unit, capacity).allocate(
            task, strategy, available_days, now.date()
        )
        completion = self.evaluator.completion_of(
            outcome.slots, outcome.shortfall, self.preferences.max_pomodoros_per_day
        )
        return AlternativeSchedule(
            strategy=strategy,
            slots=outcome.slots,
            placed_units=outcome.placed_units,
            confidence=self.evaluator.confidence_for(completion, deadline),
            description=f"{strategy.name}: {outcome.message}",
        )

    def available_days(self, now: datetime, deadline: datetime) -> int:
        """Whole days between now and the deadline, rounded up."""
        return max(0, math.ceil((deadline - now) / timedelta(days=1)))

    def _window_end(self, now: datetime) -> datetime:
        return now + timedelta(days=self.settings.focusplan_search_window_days)

    # =========================================================================
    # SCHEDULE VIEWS
    # =========================================================================

    def get_day_schedule(
        self,
        day: date,
        slots: Iterable[ScheduledSlot],
        tasks: Mapping[str, Task] | Iterable[Task] | None = None,
    ) -> list[ScheduleItem]:
        """Flatten a day's slots into pomodoro, break and buffer items."""
        if tasks is None:
            titles: dict[str, Task] = {}
        elif isinstance(tasks, Mapping):
            titles = dict(tasks)
        else:
            titles = {t.id: t for t in tasks}

        day_slots = sorted((s for s in slots if s.date == day), key=lambda s: s.start)
        items: list[ScheduleItem] = []

        for index, slot in enumerate(day_slots):
            task = titles.get(slot.task_id)
            ref = ScheduleItemTask(
                id=slot.task_id,
                title=task.text if task else slot.task_id,
                project_id=task.project_id if task else None,
            )
            for n in range(slot.unit_count):
                unit_start = slot.start + n * self.unit.cycle_minutes
                items.append(
                    ScheduleItem(
                        id=f"{slot.id}-{n + 1}",
                        time=unit_start,
                        task=ref,
                        status=slot.status,
                        type=ItemType.POMODORO,
                    )
                )
                if n < slot.unit_count - 1:
                    items.append(
                        ScheduleItem(
                            id=f"{slot.id}-{n + 1}-break",
                            time=unit_start + self.unit.work_minutes,
                            task=ref,
                            status=slot.status,
                            type=ItemType.BREAK,
                        )
                    )

            following = day_slots[index + 1] if index + 1 < len(day_slots) else None
            if following is not None and following.start > slot.end:
                gap_type = ItemType.BREAK if following.task_id == slot.task_id else ItemType.BUFFER
                items.append(
                    ScheduleItem(
                        id=f"{slot.id}-{gap_type.value}",
                        time=slot.end,
                        task=ref,
                        status=slot.status,
                        type=gap_type,
                    )
                )

        return items

    def get_available_slots(
        self, day: date, existing_slots: Iterable[ScheduledSlot] = ()
    ) -> list[TimeRange]:
        """Single-unit ranges on ``day`` that do not touch existing slots."""
        if not self.preferences.is_working_day(day):
            return []

        window = self.preferences.working_hours.window
        busy = [s.time_range for s in existing_slots if s.date == day and s.is_active]
        free = []
        cursor = window.start
        while cursor + self.unit.work_minutes <= window.end:
            candidate = TimeRange.starting_at(cursor, self.unit.work_minutes)
            if not any(candidate.overlaps(b) for b in busy):
                free.append(candidate)
            cursor = cursor + self.unit.cycle_minutes
        return free

    # =========================================================================
    # CONFLICTS
    # =========================================================================

    def detect_conflicts(self, slots: Iterable[ScheduledSlot]) -> ConflictReport:
        return self.detector.detect(slots)

    def resolve_conflicts(self, slots: Sequence[ScheduledSlot]) -> AutoResolution:
        return self.resolver.resolve_all(list(slots))

    # =========================================================================
    # CONFIGURATION & ESTIMATES
    # =========================================================================

    def update_preferences(self, overrides: Mapping[str, Any]) -> "PomodoroScheduler":
        """Return a new scheduler with ``overrides`` merged into the current preferences."""
        return PomodoroScheduler(
            preferences=Preferences.merge(overrides, self.preferences),
            unit=self.unit,
            settings=self.settings,
            eligibility=self.eligibility,
            classifier=self._classifier,
        )

    def estimate_scheduling_duration(self, tasks: Iterable[Task]) -> DurationEstimate:
        total = sum(t.remaining_units for t in tasks)
        return DurationEstimate(
            total_units=total,
            estimated_minutes=total * self.unit.cycle_minutes,
            estimated_days=math.ceil(total / self.preferences.max_pomodoros_per_day),
        )
