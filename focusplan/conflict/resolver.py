"""
Conflict Resolution for FocusPlan schedules

Applies fixes to detected conflicts:
- Auto-resolution in severity order, repeated until the schedule is stable
- Manual resolution through reschedule / remove / ignore actions
- Unresolvable conflicts are reported, never dropped

Slot lists are never mutated; every operation returns a new list.
"""

from collections.abc import Collection
from typing import assert_never

from loguru import logger

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
    GapTooSmallConflict,
    OutsideWorkingHoursConflict,
    OverlapConflict,
    TooManySessionsConflict,
)
from focusplan.core.models import PomodoroUnit, ScheduledSlot
from focusplan.core.timeofday import TimeOfDay, TimeRange

DEFAULT_MAX_PASSES = 10


class ConflictResolver:
    """
    Resolves schedule conflicts.

    Usage:
        resolver = ConflictResolver(ConflictDetector.from_preferences(prefs))
        outcome = resolver.resolve_all(slots)

        for conflict in outcome.unresolved:
            # Needs the user's attention
            pass
    """

    def __init__(self, detector: ConflictDetector, unit: PomodoroUnit | None = None):
        self.detector = detector
        self.unit = unit or PomodoroUnit(break_minutes=detector.unit_break_minutes)

    def resolve_all(
        self,
        slots: list[ScheduledSlot],
        max_passes: int = DEFAULT_MAX_PASSES,
        fixed: Collection[str] = (),
    ) -> AutoResolution:
        """
        Apply every auto-fixable fix until detection finds nothing new to fix.

        Args:
            slots: Schedule to repair
            max_passes: Upper bound on detect-and-fix rounds
            fixed: Ids of slots that must stay where they are

        Returns:
            AutoResolution with the repaired slots and any remaining conflicts
        """
        current = list(slots)
        pinned = set(fixed)
        results: list[ResolutionResult] = []
        passes = 0

        while passes < max_passes:
            report = self.detector.detect(current)
            fixable = [
                c for c in report.get_auto_fixable() if not pinned.issuperset(c.affected_slot_ids)
            ]
            if not fixable:
                break
            passes += 1
            logger.info(f"Resolution pass {passes}: {len(fixable)} auto-fixable conflict(s)")

            touched: set[str] = set()
            changed = False
            for conflict in fixable:
                # Later fixes in a pass may refer to slots an earlier fix already moved
                if touched.intersection(conflict.affected_slot_ids):
                    continue
                result = self._auto_fix(conflict, current, pinned)
                results.append(result)
                if result.status == ResolutionStatus.RESOLVED:
                    current = result.slots
                    touched.update(conflict.affected_slot_ids)
                    changed = True

            if not changed:
                break

        unresolved = self.detector.detect(current).ordered()
        if unresolved:
            logger.warning(
                f"{len(unresolved)} conflict(s) left unresolved: {[c.id for c in unresolved]}"
            )
        return AutoResolution(slots=current, results=results, unresolved=unresolved, passes=passes)

    def apply(
        self,
        conflict: Conflict,
        action: ResolutionAction,
        slots: list[ScheduledSlot],
    ) -> ResolutionResult:
        """Apply one action to one conflict."""
        match action:
            case RescheduleAction():
                return self._reschedule(conflict, action, slots)
            case RemoveAction():
                return self._remove(conflict, action, slots)
            case IgnoreAction():
                logger.info(f"Ignoring conflict {conflict.id}: {action.reason or 'accepted risk'}")
                return ResolutionResult(
                    conflict_id=conflict.id,
                    status=ResolutionStatus.IGNORED,
                    action=action.action,
                    slots=list(slots),
                    actions_taken=["Accepted as known risk"],
                )
            case _:
                assert_never(action)

    def _auto_fix(
        self, conflict: Conflict, slots: list[ScheduledSlot], pinned: set[str]
    ) -> ResolutionResult:
        """Default reschedule, relocating the earlier slot when the later one is pinned."""
        match conflict:
            case OverlapConflict() | GapTooSmallConflict() if conflict.later_slot_id in pinned:
                action = RescheduleAction(slot_id=conflict.earlier_slot_id)
                by_id = {s.id: s for s in slots}
                if conflict.earlier_slot_id not in by_id:
                    return self._failed(
                        conflict, action, slots, f"Unknown slot: {conflict.earlier_slot_id}"
                    )
                return self._relocated(conflict, action, slots, by_id[conflict.earlier_slot_id])
            case _:
                return self.apply(conflict, RescheduleAction(), slots)

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def _remove(
        self, conflict: Conflict, action: RemoveAction, slots: list[ScheduledSlot]
    ) -> ResolutionResult:
        targets = set(action.slot_ids or conflict.affected_slot_ids)
        remaining = [s for s in slots if s.id not in targets]
        removed = len(slots) - len(remaining)
        logger.info(f"Removed {removed} slot(s) for conflict {conflict.id}")
        return ResolutionResult(
            conflict_id=conflict.id,
            status=ResolutionStatus.RESOLVED,
            action=action.action,
            slots=remaining,
            actions_taken=[f"Removed {slot_id}" for slot_id in sorted(targets)],
        )

    def _reschedule(
        self, conflict: Conflict, action: RescheduleAction, slots: list[ScheduledSlot]
    ) -> ResolutionResult:
        if action.new_start is not None or action.new_date is not None:
            return self._move_explicit(conflict, action, slots)

        by_id = {s.id: s for s in slots}
        missing = [i for i in conflict.affected_slot_ids if i not in by_id]
        if missing:
            return self._failed(conflict, action, slots, f"Unknown slot(s): {missing}")

        match conflict:
            case OverlapConflict():
                earlier = by_id[conflict.earlier_slot_id]
                later = by_id[conflict.later_slot_id]
                moved = later.moved_to(earlier.end + self.detector.unit_break_minutes)
            case GapTooSmallConflict():
                earlier = by_id[conflict.earlier_slot_id]
                later = by_id[conflict.later_slot_id]
                moved = later.moved_to(earlier.end + conflict.required_minutes)
            case OutsideWorkingHoursConflict():
                return self._relocated(conflict, action, slots, by_id[conflict.slot_id])
            case TooManySessionsConflict():
                return self._failed(
                    conflict,
                    action,
                    slots,
                    "Too many sessions must be redistributed across days manually",
                )
            case _:
                assert_never(conflict)

        return self._moved(conflict, action, slots, by_id[moved.id], moved)

    def _relocated(
        self,
        conflict: Conflict,
        action: RescheduleAction,
        slots: list[ScheduledSlot],
        slot: ScheduledSlot,
    ) -> ResolutionResult:
        moved = self.relocate(slot, slots)
        if moved is None:
            return self._failed(
                conflict,
                action,
                slots,
                f"No free position inside working hours on {slot.date}",
            )
        return self._moved(conflict, action, slots, slot, moved)

    def _moved(
        self,
        conflict: Conflict,
        action: RescheduleAction,
        slots: list[ScheduledSlot],
        original: ScheduledSlot,
        moved: ScheduledSlot,
    ) -> ResolutionResult:
        logger.debug(f"Conflict {conflict.id}: moved {moved.id} {original.time_range} -> {moved.time_range}")
        return ResolutionResult(
            conflict_id=conflict.id,
            status=ResolutionStatus.RESOLVED,
            action=action.action,
            slots=self._replace(slots, moved),
            actions_taken=[f"Moved {moved.id} from {original.time_range} to {moved.time_range}"],
        )

    def _move_explicit(
        self, conflict: Conflict, action: RescheduleAction, slots: list[ScheduledSlot]
    ) -> ResolutionResult:
        slot_id = action.slot_id or conflict.affected_slot_ids[-1]
        slot = next((s for s in slots if s.id == slot_id), None)
        if slot is None:
            return self._failed(conflict, action, slots, f"Unknown slot: {slot_id}")

        moved = slot.moved_to(action.new_start or slot.start, action.new_date)
        return ResolutionResult(
            conflict_id=conflict.id,
            status=ResolutionStatus.RESOLVED,
            action=action.action,
            slots=self._replace(slots, moved),
            actions_taken=[f"Moved {slot_id} to {moved.date} {moved.time_range}"],
        )

    def relocate(self, slot: ScheduledSlot, slots: list[ScheduledSlot]) -> ScheduledSlot | None:
        """First position inside the working window clear of other slots on that date."""
        window = self.detector.working_hours.window
        duration = slot.duration_minutes
        busy = [
            s.time_range.padded(self.detector.min_break_minutes)
            for s in slots
            if s.date == slot.date and s.id != slot.id and s.is_active
        ]

        cursor: TimeOfDay = window.start
        while cursor + duration <= window.end:
            candidate = TimeRange.starting_at(cursor, duration)
            if not any(candidate.overlaps(b) for b in busy):
                return slot.moved_to(cursor)
            cursor = cursor + self.unit.cycle_minutes
        return None

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _replace(slots: list[ScheduledSlot], moved: ScheduledSlot) -> list[ScheduledSlot]:
        return [moved if s.id == moved.id else s for s in slots]

    @staticmethod
    def _failed(
        conflict: Conflict,
        action: ResolutionAction,
        slots: list[ScheduledSlot],
        reason: str,
    ) -> ResolutionResult:
        logger.warning(f"Could not resolve {conflict.id}: {reason}")
        return ResolutionResult(
            conflict_id=conflict.id,
            status=ResolutionStatus.FAILED,
            action=action.action,
            slots=list(slots),
            error_message=reason,
        )
