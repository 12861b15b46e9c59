"""
Integration tests for the PomodoroScheduler pipeline.

Runs tasks through decomposition, strategy selection, allocation,
conflict resolution and feasibility scoring end to end. The reference
time is Monday 2026-10-19 08:00 throughout.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from focusplan.core.config import Settings
from focusplan.core.models import ItemType, Priority, Task
from focusplan.core.scheduler import PomodoroScheduler, priority_eligibility
from focusplan.feasibility import RiskFactorType, RiskLevel
from focusplan.planning.strategy import StrategyType

TUESDAY = date(2026, 10, 20)
SATURDAY = date(2026, 10, 24)

# =============================================================================
# TEST FIXTURES
# =============================================================================


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def scheduler(six_a_day, settings):
    return PomodoroScheduler(six_a_day, settings=settings)


def _times(slots) -> list[str]:
    return [str(s.time_range) for s in slots]


def _assert_no_overlaps(slots):
    for i, first in enumerate(slots):
        for second in slots[i + 1 :]:
            if first.date == second.date:
                assert not first.time_range.overlaps(second.time_range), (first.id, second.id)


# =============================================================================
# SCHEDULE TASK
# =============================================================================


@pytest.mark.integration
class TestScheduleTask:
    """End-to-end scheduling of single tasks."""

    def test_plenty_of_time(self, scheduler, now):
        """Four units over ten days spread one per working day."""
        task = Task(text="Write report", estimated_units=4)

        result = scheduler.schedule_task(task, deadline=datetime(2026, 10, 29, 8, 0), now=now)

        assert result.success
        assert result.strategy.type == StrategyType.EVEN
        assert [s.date for s in result.slots] == [
            date(2026, 10, 20),
            date(2026, 10, 21),
            date(2026, 10, 22),
            date(2026, 10, 23),
        ]
        assert _times(result.slots) == ["09:00-09:25"] * 4
        assert result.confidence == 0.95
        assert result.feasibility >= 0.75
        assert result.estimated_completion == datetime(2026, 10, 23, 9, 25)
        assert result.suggested_subtasks == []
        assert result.alternatives == []
        assert result.conflicts == []
        assert result.placed_units == 4
        assert result.message == "Scheduled 'Write report' in 4 slot(s) within 10 day(s)"
        assert result.generated_by == "system"
        assert result.generated_at == now

    def test_tight_deadline(self, scheduler, now):
        """Twenty units in three days are front-loaded and fall short."""
        task = Task(id="talk", text="Prepare conference talk", estimated_units=20)

        result = scheduler.schedule_task(task, deadline=now + timedelta(days=3), now=now)

        assert not result.success
        assert result.strategy.type == StrategyType.FRONT_LOADED
        assert [s.unit_count for s in result.slots] == [4, 4, 3]
        assert result.placed_units == 11
        assert result.unplaced_units == 9
        assert "11 of 20 units placed" in result.message
        assert result.confidence == 0.3

        assert [s.estimated_units for s in result.suggested_subtasks] == [5, 10, 5]
        assert [s.subtask_id for s in result.slots] == [
            "subtask-talk-1",
            "subtask-talk-1",
            "subtask-talk-2",
        ]

        assert result.risk_assessment.overall == RiskLevel.HIGH
        factor_types = {f.type for f in result.risk_assessment.factors}
        assert RiskFactorType.TIGHT_DEADLINE in factor_types
        assert RiskFactorType.HIGH_COMPLEXITY in factor_types

        assert len(result.alternatives) == 1
        alternative = result.alternatives[0]
        assert alternative.strategy.type == StrategyType.EVEN
        assert alternative.placed_units == 18

    def test_offset_aware_deadline(self, scheduler, now):
        """Test a UTC deadline schedules like a naive one instead of raising."""
        task = Task(
            text="Write report",
            estimated_units=2,
            deadline=datetime(2026, 10, 29, 8, 0, tzinfo=timezone.utc),
        )

        result = scheduler.schedule_todo(task, now=now)

        assert result.success
        assert len(result.slots) == 2

    def test_offset_aware_arguments(self, scheduler):
        aware_now = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)

        result = scheduler.schedule_task(
            Task(text="Write report", estimated_units=2),
            deadline=aware_now + timedelta(days=10),
            now=aware_now,
        )

        assert result.success
        assert result.generated_at.tzinfo is None

    def test_completed_task(self, scheduler, now):
        """Test a task with nothing left is reported done, not at risk."""
        task = Task(text="Write report", estimated_units=3, completed_units=3)

        result = scheduler.schedule_task(task, deadline=datetime(2026, 10, 29, 8, 0), now=now)

        assert result.success
        assert result.slots == []
        assert result.confidence == 1.0
        assert result.risk_assessment.overall == RiskLevel.LOW
        assert result.risk_assessment.factors == []
        assert result.alternatives == []
        assert "already complete" in result.message

    def test_replanning_gets_fresh_ids(self, scheduler, now):
        """Test scheduling a task again around its own slots never reuses their ids."""
        task = Task(id="t", text="Write report", estimated_units=2)
        deadline = datetime(2026, 10, 29, 8, 0)

        first = scheduler.schedule_task(task, deadline=deadline, now=now)
        second = scheduler.schedule_task(
            task, deadline=deadline, existing_slots=first.slots, now=now
        )

        first_ids = {s.id for s in first.slots}
        second_ids = {s.id for s in second.slots}
        assert len(second_ids) == 2
        assert not first_ids & second_ids
        _assert_no_overlaps(first.slots + second.slots)

    def test_ineligible_priority(self, scheduler, now):
        task = Task(
            text="Reorganize bookshelf",
            estimated_units=2,
            priority=Priority.NOT_URGENT_NOT_IMPORTANT,
        )

        result = scheduler.schedule_todo(task, now=now)

        assert not result.success
        assert result.slots == []
        assert "not eligible" in result.message

    def test_custom_eligibility(self, six_a_day, settings, now):
        scheduler = PomodoroScheduler(six_a_day, settings=settings, eligibility=lambda t: True)
        task = Task(text="Reorganize bookshelf", estimated_units=2, priority="low")

        result = scheduler.schedule_todo(task, now=now)

        assert result.success
        assert len(result.slots) == 2

    def test_eligibility_from_settings(self, six_a_day, now):
        settings = Settings(_env_file=None, focusplan_auto_schedule_priorities=["urgent_important"])
        scheduler = PomodoroScheduler(six_a_day, settings=settings)

        result = scheduler.schedule_todo(Task(text="Plan", estimated_units=1), now=now)

        assert not result.success
        assert result.slots == []

    def test_priority_eligibility_skips_unknown(self):
        is_eligible = priority_eligibility(["urgent_important", "someday"])
        assert is_eligible(Task(text="a", estimated_units=1, priority="urgent_important"))
        assert not is_eligible(Task(text="a", estimated_units=1, priority="medium"))

    def test_avoids_existing_slots(self, scheduler, now, make_slot):
        existing = [make_slot("busy", "09:00", "10:55", task_id="other", units=4)]
        task = Task(text="Write report", estimated_units=2)

        result = scheduler.schedule_task(
            task, deadline=datetime(2026, 10, 29, 8, 0), existing_slots=existing, now=now
        )

        assert result.success
        assert result.slots[0].date == TUESDAY
        assert str(result.slots[0].start) == "11:10"
        _assert_no_overlaps(existing + result.slots)

    def test_deadline_in_the_past(self, scheduler, now):
        task = Task(text="Write report", estimated_units=4)

        result = scheduler.schedule_task(task, deadline=now - timedelta(days=1), now=now)

        assert not result.success
        assert result.slots == []
        assert result.confidence == 0.0
        assert result.unplaced_units == 4

    def test_task_deadline_used(self, scheduler, now):
        task = Task(text="Write report", estimated_units=2, deadline=datetime(2026, 10, 22, 18, 0))
        result = scheduler.schedule_todo(task, now=now)
        assert all(s.date <= date(2026, 10, 22) for s in result.slots)

    def test_unit_length_from_settings(self, six_a_day, now):
        settings = Settings(
            _env_file=None,
            focusplan_unit_work_minutes=50,
            focusplan_unit_break_minutes=10,
        )
        scheduler = PomodoroScheduler(six_a_day, settings=settings)

        result = scheduler.schedule_task(
            Task(text="Write report", estimated_units=1),
            deadline=datetime(2026, 10, 29, 8, 0),
            now=now,
        )

        assert _times(result.slots) == ["09:00-09:50"]

    def test_result_serializes(self, scheduler, now):
        result = scheduler.schedule_task(
            Task(text="Write report", estimated_units=4),
            deadline=datetime(2026, 10, 29, 8, 0),
            now=now,
        )
        data = result.to_dict()
        assert data["slots"][0]["start"] == "09:00"
        assert data["strategy"]["type"] == "even"


# =============================================================================
# BATCH SCHEDULING
# =============================================================================


@pytest.mark.integration
class TestScheduleTodos:
    """Tests for priority-ordered batch scheduling."""

    def test_priority_order_and_shared_snapshot(self, scheduler, now):
        later = Task(id="task-b", text="Update docs", estimated_units=2)
        urgent = Task(
            id="task-a", text="Fix login", estimated_units=2, priority=Priority.URGENT_IMPORTANT
        )

        results = scheduler.schedule_todos([later, urgent], now=now)

        assert [r.task_id for r in results] == ["task-a", "task-b"]
        assert str(results[0].slots[0].time_range) == "09:00-09:25"
        assert str(results[1].slots[0].start) == "09:40"

        combined = [s for r in results for s in r.slots]
        _assert_no_overlaps(combined)
        assert scheduler.detect_conflicts(combined).is_clean

    def test_stable_within_priority(self, scheduler, now):
        first = Task(id="first", text="One", estimated_units=1)
        second = Task(id="second", text="Two", estimated_units=1)
        results = scheduler.schedule_todos([first, second], now=now)
        assert [r.task_id for r in results] == ["first", "second"]


# =============================================================================
# VIEWS AND CONFIGURATION
# =============================================================================


@pytest.mark.integration
class TestDaySchedule:
    """Tests for get_day_schedule."""

    def test_items(self, scheduler, make_slot):
        slots = [
            make_slot("s1", "09:00", "09:55", task_id="t1", units=2),
            make_slot("s2", "10:10", "10:35", task_id="t2"),
            make_slot("other-day", "09:00", day=date(2026, 10, 21)),
        ]
        tasks = [
            Task(id="t1", text="Write report", estimated_units=2, project_id="p1"),
            Task(id="t2", text="Review PR", estimated_units=1),
        ]

        items = scheduler.get_day_schedule(TUESDAY, slots, tasks)

        assert [i.type for i in items] == [
            ItemType.POMODORO,
            ItemType.BREAK,
            ItemType.POMODORO,
            ItemType.BUFFER,
            ItemType.POMODORO,
        ]
        assert [str(i.time) for i in items] == ["09:00", "09:25", "09:30", "09:55", "10:10"]
        assert [i.id for i in items] == ["s1-1", "s1-1-break", "s1-2", "s1-buffer", "s2-1"]
        assert items[0].to_dict()["task"] == {
            "id": "t1",
            "title": "Write report",
            "projectId": "p1",
        }

    def test_same_task_gap_is_break(self, scheduler, make_slot):
        slots = [make_slot("s1", "09:00", task_id="t1"), make_slot("s2", "09:40", task_id="t1")]
        items = scheduler.get_day_schedule(TUESDAY, slots)
        assert [i.id for i in items] == ["s1-1", "s1-break", "s2-1"]
        assert items[0].task.title == "t1"


@pytest.mark.integration
class TestAvailableSlots:
    """Tests for get_available_slots."""

    def test_free_units(self, scheduler, make_slot):
        free = scheduler.get_available_slots(TUESDAY, [make_slot("a", "09:00", "09:55", units=2)])
        assert len(free) == 16
        assert str(free[0]) == "10:00-10:25"
        assert str(free[-1]) == "17:30-17:55"

    def test_non_working_day(self, scheduler):
        assert scheduler.get_available_slots(SATURDAY) == []


@pytest.mark.integration
class TestConfiguration:
    """Tests for preference updates and estimates."""

    def test_update_preferences(self, scheduler):
        updated = scheduler.update_preferences({"maxPomodorosPerDay": 4, "minBreakMinutes": 10})

        assert updated is not scheduler
        assert updated.preferences.max_pomodoros_per_day == 4
        assert updated.detector.min_break_minutes == 10
        assert scheduler.preferences.max_pomodoros_per_day == 6

    def test_estimate(self, scheduler):
        estimate = scheduler.estimate_scheduling_duration(
            [Task(text="a", estimated_units=4), Task(text="b", estimated_units=20)]
        )
        assert estimate.total_units == 24
        assert estimate.estimated_minutes == 720
        assert estimate.estimated_days == 4

    def test_available_days(self, scheduler, now):
        assert scheduler.available_days(now, now + timedelta(days=3)) == 3
        assert scheduler.available_days(now, now + timedelta(days=2, hours=1)) == 3
        assert scheduler.available_days(now, now - timedelta(days=1)) == 0
