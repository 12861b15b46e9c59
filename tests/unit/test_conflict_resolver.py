"""
Unit tests for the ConflictResolver module.

Tests:
- Auto-resolution of each conflict type
- Multi-pass resolution of cascading overlaps
- Manual reschedule / remove / ignore actions
- Failure reporting for unresolvable conflicts
"""

from datetime import date

import pytest
from pydantic import TypeAdapter

from focusplan.conflict import (
    ConflictDetector,
    ConflictResolver,
    IgnoreAction,
    RemoveAction,
    RescheduleAction,
    ResolutionAction,
    ResolutionStatus,
)
from focusplan.core.models import WorkingHours

TUESDAY = date(2026, 10, 20)
WEDNESDAY = date(2026, 10, 21)

# =============================================================================
# TEST FIXTURES
# =============================================================================


@pytest.fixture
def detector():
    return ConflictDetector()


@pytest.fixture
def resolver(detector):
    return ConflictResolver(detector)


@pytest.fixture
def overlapping(make_slot):
    return [make_slot("a", "09:00"), make_slot("b", "09:10", "09:30")]


def _times(slots) -> dict[str, str]:
    return {s.id: str(s.time_range) for s in slots}


def _assert_no_overlaps(slots):
    by_date = {}
    for slot in slots:
        by_date.setdefault(slot.date, []).append(slot)
    for day_slots in by_date.values():
        for i, first in enumerate(day_slots):
            for second in day_slots[i + 1 :]:
                assert not first.time_range.overlaps(second.time_range)


# =============================================================================
# AUTO-RESOLUTION
# =============================================================================


class TestResolveAll:
    """Tests for ConflictResolver.resolve_all."""

    def test_overlap_moves_later_slot(self, resolver, overlapping):
        outcome = resolver.resolve_all(overlapping)

        assert outcome.is_clean
        assert _times(outcome.slots) == {"a": "09:00-09:25", "b": "09:30-09:50"}
        assert outcome.passes == 1
        assert outcome.results[0].status == ResolutionStatus.RESOLVED
        assert outcome.results[0].conflict_id == "overlap_a_b"

    def test_input_not_mutated(self, resolver, overlapping):
        resolver.resolve_all(overlapping)
        assert _times(overlapping) == {"a": "09:00-09:25", "b": "09:10-09:30"}

    def test_small_gap_widened(self, resolver, make_slot):
        outcome = resolver.resolve_all([make_slot("a", "09:00"), make_slot("b", "09:28")])
        assert _times(outcome.slots)["b"] == "09:30-09:55"
        assert outcome.is_clean

    def test_outside_hours_relocated(self, resolver, make_slot):
        outcome = resolver.resolve_all([make_slot("x", "08:30")])
        assert _times(outcome.slots) == {"x": "09:00-09:25"}
        assert outcome.is_clean

    def test_relocation_avoids_other_slots(self, resolver, make_slot):
        outcome = resolver.resolve_all([make_slot("x", "09:00"), make_slot("y", "08:00")])
        assert _times(outcome.slots) == {"x": "09:00-09:25", "y": "09:30-09:55"}
        assert outcome.is_clean

    def test_cascading_overlaps(self, resolver, make_slot):
        """Test stacked slots are spread out over several passes."""
        slots = [make_slot("a", "09:00"), make_slot("b", "09:00"), make_slot("c", "09:00")]

        outcome = resolver.resolve_all(slots)

        assert outcome.is_clean
        assert _times(outcome.slots) == {
            "a": "09:00-09:25",
            "b": "09:30-09:55",
            "c": "10:00-10:25",
        }
        _assert_no_overlaps(outcome.slots)

    def test_clean_schedule_untouched(self, resolver, make_slot):
        slots = [make_slot("a", "09:00"), make_slot("b", "09:30")]
        outcome = resolver.resolve_all(slots)
        assert outcome.passes == 0
        assert outcome.results == []
        assert outcome.slots == slots

    def test_unresolvable_outside_hours(self, make_slot):
        detector = ConflictDetector(working_hours=WorkingHours(start="09:00", end="10:00"))
        resolver = ConflictResolver(detector)
        slots = [make_slot("a", "09:00", "09:55", units=2), make_slot("b", "10:30")]

        outcome = resolver.resolve_all(slots)

        assert not outcome.is_clean
        assert [c.id for c in outcome.unresolved] == ["hours_b"]
        assert outcome.results[0].status == ResolutionStatus.FAILED
        assert "No free position" in outcome.results[0].error_message
        assert _times(outcome.slots)["b"] == "10:30-10:55"

    def test_too_many_sessions_reported(self, make_slot):
        resolver = ConflictResolver(ConflictDetector(max_sessions_per_day=3))
        slots = [make_slot(f"s{i}", t) for i, t in enumerate(["09:00", "09:30", "10:00", "10:30"])]

        outcome = resolver.resolve_all(slots)

        assert outcome.passes == 0
        assert [c.id for c in outcome.unresolved] == ["sessions_2026-10-20"]

    def test_fixed_later_slot_stays(self, resolver, make_slot):
        """Test the movable earlier slot is relocated when the later one is fixed."""
        slots = [make_slot("new", "09:00"), make_slot("kept", "09:10", "09:35")]

        outcome = resolver.resolve_all(slots, fixed={"kept"})

        assert outcome.is_clean
        assert _times(outcome.slots) == {"new": "10:00-10:25", "kept": "09:10-09:35"}

    def test_fixed_earlier_slot_stays(self, resolver, make_slot):
        slots = [make_slot("kept", "09:00"), make_slot("new", "09:10", "09:35")]

        outcome = resolver.resolve_all(slots, fixed={"kept"})

        assert _times(outcome.slots) == {"kept": "09:00-09:25", "new": "09:30-09:55"}

    def test_conflicts_between_fixed_slots_left_alone(self, resolver, overlapping):
        outcome = resolver.resolve_all(overlapping, fixed={"a", "b"})

        assert outcome.passes == 0
        assert _times(outcome.slots) == {"a": "09:00-09:25", "b": "09:10-09:30"}
        assert [c.id for c in outcome.unresolved] == ["overlap_a_b"]

    def test_moved_slot_pushed_off_fixed_neighbour(self, resolver, make_slot):
        """Test a shifted slot that lands on a fixed slot is moved again."""
        slots = [
            make_slot("a", "09:00"),
            make_slot("b", "09:10", "09:35"),
            make_slot("kept", "09:40"),
        ]

        outcome = resolver.resolve_all(slots, fixed={"kept"})

        assert outcome.is_clean
        assert _times(outcome.slots)["kept"] == "09:40-10:05"
        _assert_no_overlaps(outcome.slots)

    def test_overlap_spacing_matches_suggestion(self, make_slot):
        detector = ConflictDetector(unit_break_minutes=10)
        slots = [make_slot("a", "09:00"), make_slot("b", "09:10", "09:30")]
        conflict = detector.detect(slots).conflicts[0]

        outcome = ConflictResolver(detector).resolve_all(slots)

        assert conflict.suggested_resolution == "Move the later slot to 09:35"
        assert _times(outcome.slots)["b"] == "09:35-09:55"

    def test_to_dict(self, resolver, overlapping):
        result = resolver.resolve_all(overlapping).to_dict()
        assert result["passes"] == 1
        assert result["unresolved"] == []
        assert result["results"][0]["status"] == "resolved"


# =============================================================================
# MANUAL ACTIONS
# =============================================================================


class TestApply:
    """Tests for ConflictResolver.apply."""

    @pytest.fixture
    def overlap(self, detector, overlapping):
        return detector.detect(overlapping).conflicts[0]

    def test_explicit_reschedule(self, resolver, overlap, overlapping):
        action = RescheduleAction(slot_id="b", new_start="11:00")
        result = resolver.apply(overlap, action, overlapping)

        assert result.succeeded
        assert _times(result.slots)["b"] == "11:00-11:20"

    def test_explicit_reschedule_to_other_date(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, RescheduleAction(new_date=WEDNESDAY), overlapping)
        moved = {s.id: s for s in result.slots}["b"]
        assert moved.date == WEDNESDAY
        assert str(moved.time_range) == "09:10-09:30"

    def test_explicit_reschedule_unknown_slot(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, RescheduleAction(slot_id="zzz", new_start="11:00"), overlapping)
        assert result.status == ResolutionStatus.FAILED

    def test_default_reschedule(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, RescheduleAction(), overlapping)
        assert _times(result.slots)["b"] == "09:30-09:50"
        assert result.actions_taken == ["Moved b from 09:10-09:30 to 09:30-09:50"]

    def test_missing_slot_fails(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, RescheduleAction(), overlapping[:1])
        assert result.status == ResolutionStatus.FAILED
        assert not result.succeeded

    def test_remove_all_affected(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, RemoveAction(), overlapping)
        assert result.slots == []
        assert result.actions_taken == ["Removed a", "Removed b"]

    def test_remove_selected(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, RemoveAction(slot_ids=["b"]), overlapping)
        assert [s.id for s in result.slots] == ["a"]

    def test_ignore(self, resolver, overlap, overlapping):
        result = resolver.apply(overlap, IgnoreAction(reason="deliberate double booking"), overlapping)
        assert result.status == ResolutionStatus.IGNORED
        assert result.succeeded
        assert result.slots == overlapping

    def test_too_many_sessions_cannot_be_rescheduled(self, make_slot):
        detector = ConflictDetector(max_sessions_per_day=1)
        slots = [make_slot("a", "09:00"), make_slot("b", "09:30")]
        conflict = detector.detect(slots).conflicts[0]

        result = ConflictResolver(detector).apply(conflict, RescheduleAction(), slots)

        assert result.status == ResolutionStatus.FAILED
        assert result.error_message

    def test_actions_parse_from_dicts(self):
        adapter = TypeAdapter(ResolutionAction)
        assert isinstance(adapter.validate_python({"action": "remove"}), RemoveAction)
        assert isinstance(adapter.validate_python({"action": "ignore", "reason": "ok"}), IgnoreAction)
        action = adapter.validate_python({"action": "reschedule", "new_start": "10:00"})
        assert isinstance(action, RescheduleAction)
        assert str(action.new_start) == "10:00"
