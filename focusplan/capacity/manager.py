"""Capacity tracking, allocation and utilization analysis.

The manager owns a ledger of active slots built from the caller's
snapshot. Read operations aggregate the ledger into day, week and month
views; mutations place, release, transfer or move slots in the ledger.
Mutations report misuse by returning ``False`` and logging a warning.
"""

import calendar
import math
import statistics
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta

from loguru import logger

from focusplan.capacity.models import (
    AllocationConstraint,
    AlternativeAllocation,
    BandDistribution,
    CapacityAllocationRequest,
    CapacityAllocationResult,
    CapacityGap,
    CapacityHealthMetrics,
    CapacityPrediction,
    CapacityRecommendation,
    CapacityRisk,
    CapacityUtilizationAnalysis,
    ConstraintType,
    DailyCapacity,
    DailyDemandPrediction,
    DateRange,
    Flexibility,
    GapSeverity,
    HealthFlag,
    HealthRating,
    LoadDistribution,
    MonthlyCapacity,
    TimeBand,
    WeeklyCapacity,
)
from focusplan.core.models import PomodoroUnit, Preferences, ScheduledSlot, Task
from focusplan.core.timeofday import TimeOfDay, TimeRange

OVERTIME_RATIO = 0.25
PEAK_UTILIZATION = 0.8
LIGHT_UTILIZATION = 0.3
EXTEND_RANGE_DAYS = 7


class CapacityManager:
    """
    Track per-day capacity against a snapshot of existing slots.

    Example:
        >>> manager = CapacityManager(Preferences(), existing_slots=slots)
        >>> manager.available_units(date(2026, 10, 20))
        10
    """

    def __init__(
        self,
        preferences: Preferences | None = None,
        unit: PomodoroUnit | None = None,
        existing_slots: Iterable[ScheduledSlot] = (),
    ) -> None:
        self.preferences = preferences or Preferences()
        self.unit = unit or PomodoroUnit()
        existing = list(existing_slots)
        self._ledger: dict[str, ScheduledSlot] = {
            slot.id: slot for slot in existing if slot.is_active
        }
        self._inactive_ids = {slot.id for slot in existing if not slot.is_active}

    @property
    def slots(self) -> list[ScheduledSlot]:
        """Current ledger contents, ordered by date and start."""
        return sorted(self._ledger.values(), key=lambda s: (s.date, s.start))

    @property
    def overtime_units(self) -> int:
        return math.floor(self.preferences.max_pomodoros_per_day * OVERTIME_RATIO)

    def id_taken(self, slot_id: str) -> bool:
        """True when any known slot, active or not, already uses ``slot_id``."""
        return slot_id in self._ledger or slot_id in self._inactive_ids

    def slots_on(self, day: date, exclude: Iterable[str] = ()) -> list[ScheduledSlot]:
        excluded = set(exclude)
        return sorted(
            (s for s in self._ledger.values() if s.date == day and s.id not in excluded),
            key=lambda s: s.start,
        )

    # =========================================================================
    # READS
    # =========================================================================

    def used_units(self, day: date) -> int:
        return sum(s.unit_count for s in self._ledger.values() if s.date == day)

    def get_daily_capacity(self, day: date) -> DailyCapacity:
        is_working = self.preferences.is_working_day(day)
        total = self.preferences.max_pomodoros_per_day if is_working else 0
        used = self.used_units(day)
        return DailyCapacity(
            date=day,
            total_units=total,
            available_units=max(0, total - used),
            used_units=used,
            working_hours=self.preferences.working_hours,
            overtime_units=self.overtime_units if is_working else 0,
            is_working_day=is_working,
            utilization_rate=used / total if total else 0.0,
        )

    def available_units(self, day: date) -> int:
        return self.get_daily_capacity(day).available_units

    def get_weekly_capacity(self, week_start: date) -> WeeklyCapacity:
        week = DateRange(start=week_start, end=week_start + timedelta(days=6))
        daily = [self.get_daily_capacity(d) for d in week.days()]
        working = [d for d in daily if d.is_working_day]

        total = sum(d.total_units for d in daily)
        used = sum(d.used_units for d in daily)
        loads = [d.used_units for d in working]

        weekly = WeeklyCapacity(
            week_start=week.start,
            week_end=week.end,
            daily=daily,
            total_units=total,
            available_units=sum(d.available_units for d in daily),
            used_units=used,
            utilization_rate=used / total if total else 0.0,
            peak_days=[d.date for d in working if d.utilization_rate >= PEAK_UTILIZATION],
            light_days=[d.date for d in working if d.utilization_rate <= LIGHT_UTILIZATION],
            average_daily_load=statistics.fmean(loads) if loads else 0.0,
            load_variance=statistics.pvariance(loads) if loads else 0.0,
        )
        weekly.recommendations = self._weekly_recommendations(weekly)
        return weekly

    def _weekly_recommendations(self, weekly: WeeklyCapacity) -> list[CapacityRecommendation]:
        recommendations = []
        if weekly.utilization_rate > 0.9:
            recommendations.append(
                CapacityRecommendation(
                    type="rest",
                    priority="high",
                    title="Schedule recovery time",
                    description="The week is almost fully booked; keep at least one light day",
                )
            )
        if weekly.peak_days and weekly.light_days:
            recommendations.append(
                CapacityRecommendation(
                    type="redistribute",
                    priority="medium",
                    title="Even out the week",
                    description=(
                        f"Move work from {len(weekly.peak_days)} peak day(s) "
                        f"to {len(weekly.light_days)} light day(s)"
                    ),
                )
            )
        if weekly.total_units and weekly.utilization_rate < LIGHT_UTILIZATION:
            recommendations.append(
                CapacityRecommendation(
                    type="increase",
                    priority="low",
                    title="Capacity is underused",
                    description="There is room to pull upcoming work into this week",
                )
            )
        return recommendations

    def get_monthly_capacity(self, year: int, month: int) -> MonthlyCapacity:
        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])

        weekly = []
        week_start = first - timedelta(days=first.weekday())
        while week_start <= last:
            weekly.append(self.get_weekly_capacity(week_start))
            week_start += timedelta(days=7)

        daily = [self.get_daily_capacity(d) for d in DateRange(start=first, end=last).days()]
        working = [d for d in daily if d.is_working_day]
        total = sum(d.total_units for d in daily)

        distribution = LoadDistribution()
        for d in working:
            if d.utilization_rate < 0.5:
                distribution.light += 1
            elif d.utilization_rate < PEAK_UTILIZATION:
                distribution.medium += 1
            elif d.utilization_rate <= 1.0:
                distribution.heavy += 1
            else:
                distribution.overload += 1

        return MonthlyCapacity(
            year=year,
            month=month,
            weekly=weekly,
            total_units=total,
            used_units=sum(d.used_units for d in daily),
            working_days=len(working),
            average_daily_capacity=total / len(working) if working else 0.0,
            utilization_trend=[d.utilization_rate for d in working],
            distribution=distribution,
        )

    # =========================================================================
    # FREE-TIME SEARCH
    # =========================================================================

    def free_ranges(
        self,
        day: date,
        padding: int = 0,
        exclude: Iterable[str] = (),
        window: TimeRange | None = None,
    ) -> list[TimeRange]:
        """Gaps in the working window not touching ledger slots padded by ``padding``."""
        window = window or self.preferences.working_hours.window
        busy = [s.time_range.padded(padding) for s in self.slots_on(day, exclude)]

        gaps = []
        cursor = window.start
        for blocked in sorted(busy, key=lambda r: r.start):
            if blocked.start > cursor:
                gap_end = min(blocked.start, window.end)
                if gap_end > cursor:
                    gaps.append(TimeRange(cursor, gap_end))
            cursor = max(cursor, blocked.end)
            if cursor >= window.end:
                break
        if cursor < window.end:
            gaps.append(TimeRange(cursor, window.end))
        return gaps

    def find_start(
        self, day: date, units: int, padding: int = 0, exclude: Iterable[str] = ()
    ) -> TimeOfDay | None:
        """Earliest start where ``units`` consecutive units fit, or None."""
        span = self.unit.span_minutes(units)
        for gap in self.free_ranges(day, padding, exclude):
            if gap.duration_minutes >= span:
                return gap.start
        return None

    def largest_block(self, day: date, padding: int = 0) -> tuple[TimeOfDay, int] | None:
        """Start and unit count of the biggest block that fits on ``day``."""
        best = None
        for gap in self.free_ranges(day, padding):
            units = self.unit.units_fitting(gap.duration_minutes)
            if units and (best is None or units > best[1]):
                best = (gap.start, units)
        return best

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def allocate_capacity(self, request: CapacityAllocationRequest) -> CapacityAllocationResult:
        """Place the requested units and commit them to the ledger."""
        logger.info(
            f"Allocating {request.required_units} units for task {request.task_id} "
            f"({request.flexibility.value}) in {request.date_range.start}..{request.date_range.end}"
        )

        primary = self._plan(request, request.date_range, relax_should=False, overtime=False)
        placed = sum(s.unit_count for s in primary)
        alternatives: list[AlternativeAllocation] = []
        warnings: list[str] = []
        chosen = primary
        strategy = "primary"

        if placed < request.required_units:
            alternatives = self._alternatives(request, placed)
            if request.flexibility == Flexibility.ADAPTIVE and alternatives:
                best = alternatives[0]
                chosen = best.slots
                strategy = best.id
                warnings.append(f"Applied alternative '{best.id}': {best.description}")

        for slot in chosen:
            self._ledger[slot.id] = slot

        allocated = sum(s.unit_count for s in chosen)
        range_total = sum(self.get_daily_capacity(d).total_units for d in request.date_range.days())
        success = allocated >= request.required_units
        if success:
            message = f"Allocated {allocated} units across {len(chosen)} slot(s)"
        else:
            message = f"{allocated} of {request.required_units} units allocated"
            logger.warning(f"Allocation for task {request.task_id} short: {message}")

        return CapacityAllocationResult(
            success=success,
            message=message,
            slots=chosen,
            requested_units=request.required_units,
            allocated_units=allocated,
            strategy=strategy,
            utilization_impact=allocated / range_total if range_total else 0.0,
            alternatives=alternatives,
            warnings=warnings,
        )

    def _alternatives(
        self, request: CapacityAllocationRequest, placed: int
    ) -> list[AlternativeAllocation]:
        """Ranked fallbacks for a request the primary plan could not satisfy."""
        options = [
            (
                "extend_range",
                f"Extend the date range by {EXTEND_RANGE_DAYS} days",
                request.date_range.extended(EXTEND_RANGE_DAYS),
                False,
                False,
                0.1,
                ["Completion moves later"],
            ),
            (
                "overtime",
                f"Use up to {self.overtime_units} overtime units per day",
                request.date_range,
                False,
                True,
                0.2,
                ["Longer working days", "Higher stress"],
            ),
        ]
        should = [c for c in request.constraints if c.type == ConstraintType.SHOULD]
        if should:
            options.append(
                (
                    "relax_constraints",
                    "Ignore soft (should) constraints",
                    request.date_range,
                    True,
                    False,
                    sum(c.penalty for c in should),
                    [f"Violates: {c.description or c.field.value}" for c in should],
                )
            )

        alternatives = []
        for option_id, description, date_range, relax, overtime, penalty, tradeoffs in options:
            slots = self._plan(request, date_range, relax_should=relax, overtime=overtime)
            units = sum(s.unit_count for s in slots)
            if units <= placed:
                continue
            alternatives.append(
                AlternativeAllocation(
                    id=option_id,
                    description=description,
                    slots=slots,
                    allocated_units=units,
                    score=max(0.0, min(1.0, units / request.required_units) - penalty),
                    tradeoffs=tradeoffs,
                )
            )

        alternatives.sort(key=lambda a: a.score, reverse=True)
        return alternatives

    def _plan(
        self,
        request: CapacityAllocationRequest,
        date_range: DateRange,
        relax_should: bool,
        overtime: bool,
    ) -> list[ScheduledSlot]:
        """Compute placements without touching the ledger."""
        hard = [
            c
            for c in request.constraints
            if c.type == ConstraintType.MUST or (c.type == ConstraintType.SHOULD and not relax_should)
        ]
        days = [d for d in date_range.days() if self.preferences.is_working_day(d)]
        if request.preferred_date in days:
            days.remove(request.preferred_date)
            days.insert(0, request.preferred_date)

        remaining = request.required_units
        slots: list[ScheduledSlot] = []
        for day in days:
            if remaining <= 0:
                break

            budget = self.available_units(day) - sum(s.unit_count for s in slots if s.date == day)
            if overtime:
                budget += self.overtime_units
            units = min(remaining, budget)
            if request.flexibility == Flexibility.RIGID and units < remaining:
                continue
            if units < min(request.minimum_block_size, remaining):
                continue

            placement = self._place_block(request, day, units, hard, overtime)
            if placement is None:
                continue
            start, fitted = placement
            if request.flexibility == Flexibility.RIGID and fitted < remaining:
                continue

            slots.append(
                ScheduledSlot(
                    id=f"slot-{request.task_id}-{day:%Y%m%d}-{start.minutes}",
                    task_id=request.task_id,
                    subtask_id=request.subtask_id,
                    date=day,
                    start=start,
                    end=start + self.unit.span_minutes(fitted),
                    unit_count=fitted,
                    is_flexible=request.flexibility != Flexibility.RIGID,
                    priority=request.priority,
                )
            )
            remaining -= fitted
        return slots

    def _place_block(
        self,
        request: CapacityAllocationRequest,
        day: date,
        units: int,
        hard: list[AllocationConstraint],
        overtime: bool,
    ) -> tuple[TimeOfDay, int] | None:
        """Find a start for up to ``units`` on ``day`` honoring band and hard constraints."""
        window = self.preferences.working_hours.window
        if overtime:
            window = TimeRange(window.start, window.end + self.overtime_units * self.unit.cycle_minutes)
        gaps = self.free_ranges(day, self.preferences.buffer_time, window=window)

        candidates = []
        smallest = min(request.minimum_block_size, units)
        for count in range(units, smallest - 1, -1):
            span = self.unit.span_minutes(count)
            for gap in gaps:
                cursor = gap.start
                while cursor + span <= gap.end:
                    band = TimeBand.of(cursor)
                    if band not in request.avoid_bands and all(
                        c.is_satisfied(day, cursor, count) for c in hard
                    ):
                        candidates.append((band in request.preferred_bands, cursor, count))
                    cursor = cursor + self.unit.cycle_minutes
            if candidates:
                break

        if not candidates:
            return None
        # Preferred bands first, then the earliest start.
        _, start, count = min(candidates, key=lambda c: (not c[0], c[1]))
        return start, count

    def reserve(self, slot: ScheduledSlot) -> bool:
        """Record an externally placed slot in the ledger."""
        if slot.id in self._ledger:
            logger.warning(f"Slot {slot.id} is already in the ledger")
            return False
        self._ledger[slot.id] = slot
        return True

    def release_capacity(self, slot_id: str) -> bool:
        if slot_id not in self._ledger:
            logger.warning(f"Cannot release unknown slot {slot_id}")
            return False
        slot = self._ledger.pop(slot_id)
        logger.info(f"Released {slot.unit_count} units from slot {slot_id} on {slot.date}")
        return True

    def transfer_capacity(self, from_slot: str, to_slot: str, amount: int) -> bool:
        """Move ``amount`` units from one slot to another."""
        source = self._ledger.get(from_slot)
        target = self._ledger.get(to_slot)
        if source is None or target is None:
            logger.warning(f"Cannot transfer between unknown slots {from_slot} -> {to_slot}")
            return False
        if from_slot == to_slot or amount <= 0 or amount > source.unit_count:
            logger.warning(
                f"Invalid transfer of {amount} units from {from_slot} ({source.unit_count}) to {to_slot}"
            )
            return False

        freed = amount if source.date == target.date else 0
        if self.available_units(target.date) + freed < amount:
            logger.warning(f"Not enough capacity on {target.date} to transfer {amount} units")
            return False

        grown = target.model_copy(
            update={
                "unit_count": target.unit_count + amount,
                "end": target.start + self.unit.span_minutes(target.unit_count + amount),
            }
        )
        window = self.preferences.working_hours.window
        others = self.slots_on(target.date, exclude=(from_slot, to_slot))
        if source.date == target.date and amount < source.unit_count:
            others.append(source)
        if not window.covers(grown.time_range) or any(
            grown.time_range.overlaps(o.time_range) for o in others
        ):
            logger.warning(f"Slot {to_slot} cannot grow by {amount} units without collisions")
            return False

        if amount == source.unit_count:
            del self._ledger[from_slot]
        else:
            remaining = source.unit_count - amount
            self._ledger[from_slot] = source.model_copy(
                update={
                    "unit_count": remaining,
                    "end": source.start + self.unit.span_minutes(remaining),
                }
            )
        self._ledger[to_slot] = grown
        logger.info(f"Transferred {amount} units from {from_slot} to {to_slot}")
        return True

    def reschedule_slot(self, slot_id: str, new_date: date) -> bool:
        """Move a slot to the earliest free position on ``new_date``."""
        slot = self._ledger.get(slot_id)
        if slot is None:
            logger.warning(f"Cannot reschedule unknown slot {slot_id}")
            return False
        if not self.preferences.is_working_day(new_date):
            logger.warning(f"Cannot reschedule slot {slot_id} to non-working day {new_date}")
            return False

        freed = slot.unit_count if slot.date == new_date else 0
        if self.available_units(new_date) + freed < slot.unit_count:
            logger.warning(f"Not enough capacity on {new_date} for slot {slot_id}")
            return False

        start = self.find_start(
            new_date, slot.unit_count, self.preferences.buffer_time, exclude=(slot_id,)
        )
        if start is None:
            logger.warning(f"No free position on {new_date} for slot {slot_id}")
            return False

        self._ledger[slot_id] = slot.moved_to(start, new_date)
        logger.info(f"Rescheduled slot {slot_id} to {new_date} {start}")
        return True

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    def analyze_utilization(self, start: date, end: date) -> CapacityUtilizationAnalysis:
        date_range = DateRange(start=start, end=end)
        daily = [self.get_daily_capacity(d) for d in date_range.days()]
        working = [d for d in daily if d.is_working_day]
        rates = [d.utilization_rate for d in working] or [0.0]
        loads = [d.used_units for d in working]

        total = sum(d.total_units for d in daily)
        used = sum(d.used_units for d in daily)
        average = statistics.fmean(rates)

        band_units: dict[TimeBand, int] = defaultdict(int)
        for slot in self._ledger.values():
            if start <= slot.date <= end:
                band_units[TimeBand.of(slot.start)] += slot.unit_count
        band_total = sum(band_units.values())
        bands = BandDistribution(
            **{
                band.value: (band_units[band] / band_total if band_total else 0.0)
                for band in TimeBand
            }
        )

        mean_load = statistics.fmean(loads) if loads else 0.0
        if mean_load > 0:
            balance = 1.0 - min(1.0, statistics.pstdev(loads) / mean_load)
        else:
            balance = 1.0
        stress = min(1.0, average)
        heavy_share = sum(1 for r in rates if r >= 0.9) / len(rates)
        sustainability = _clamp((1.0 - stress) * 0.5 + balance * 0.5)
        burnout = _clamp(stress * 0.5 + heavy_share * 0.3 + bands.evening * 0.2)

        red_flags = []
        if any(r > 1.0 for r in rates):
            red_flags.append(HealthFlag.OVERLOADED_DAYS)
        if average >= 0.85:
            red_flags.append(HealthFlag.SUSTAINED_HIGH_LOAD)
        if balance < 0.5:
            red_flags.append(HealthFlag.UNBALANCED_WORKLOAD)
        if bands.evening > 0.3:
            red_flags.append(HealthFlag.HEAVY_EVENING_WORK)

        strengths = []
        if balance >= 0.8 and used:
            strengths.append(HealthFlag.BALANCED_WORKLOAD)
        if 0.4 <= average <= 0.8:
            strengths.append(HealthFlag.HEALTHY_UTILIZATION)
        if bands.morning >= 0.5:
            strengths.append(HealthFlag.MORNING_FOCUS)

        health_score = (balance + sustainability + (1.0 - burnout)) / 3
        if health_score >= 0.8:
            rating = HealthRating.EXCELLENT
        elif health_score >= 0.6:
            rating = HealthRating.GOOD
        elif health_score >= 0.4:
            rating = HealthRating.FAIR
        else:
            rating = HealthRating.POOR

        logger.debug(
            f"Utilization {start}..{end}: overall={used}/{total}, balance={balance:.2f}, "
            f"stress={stress:.2f}, flags={[f.value for f in red_flags]}"
        )

        return CapacityUtilizationAnalysis(
            date_range=date_range,
            overall_utilization=used / total if total else 0.0,
            average_daily_utilization=average,
            peak_utilization=max(rates),
            minimum_utilization=min(rates),
            time_distribution=bands,
            health=CapacityHealthMetrics(
                overall_health=rating,
                workload_balance=_clamp(balance),
                stress_level=stress,
                sustainability=sustainability,
                burnout_risk=burnout,
                red_flags=red_flags,
                strengths=strengths,
            ),
        )

    def predict_capacity_needs(
        self, tasks: Iterable[Task], start: date, end: date
    ) -> CapacityPrediction:
        """Spread each task's remaining units over the working days before its deadline."""
        date_range = DateRange(start=start, end=end)
        working = [d for d in date_range.days() if self.preferences.is_working_day(d)]
        demand: dict[date, float] = defaultdict(float)
        task_list = [t for t in tasks if t.remaining_units > 0]

        for task in task_list:
            if not working:
                break
            days = working
            if task.deadline is not None:
                days = [d for d in working if d <= task.deadline.date()] or working[:1]
            share = task.remaining_units / len(days)
            for d in days:
                demand[d] += share

        daily = []
        gaps = []
        for d in working:
            capacity = self.available_units(d)
            gap = demand[d] - capacity
            daily.append(
                DailyDemandPrediction(date=d, predicted_demand=demand[d], capacity=capacity, gap=gap)
            )
            if gap > 0:
                gaps.append(
                    CapacityGap(
                        date=d,
                        gap_size=gap,
                        severity=self._gap_severity(gap),
                        suggestions=[
                            "Move flexible work to a lighter day",
                            "Renegotiate the deadline of a lower-priority task",
                        ],
                    )
                )

        total_demand = sum(demand.values())
        total_capacity = sum(p.capacity for p in daily)
        risks = self._prediction_risks(daily, gaps, total_demand, total_capacity)

        with_deadline = sum(1 for t in task_list if t.deadline is not None)
        confidence = 0.6 + 0.2 * (with_deadline / len(task_list)) if task_list else 0.0

        logger.info(
            f"Predicted demand {total_demand:.1f} vs capacity {total_capacity} "
            f"over {len(working)} working days, {len(gaps)} gap(s)"
        )

        return CapacityPrediction(
            date_range=date_range,
            daily=daily,
            gaps=gaps,
            risks=risks,
            total_demand=total_demand,
            total_capacity=total_capacity,
            confidence=confidence,
        )

    def _gap_severity(self, gap: float) -> GapSeverity:
        ratio = gap / self.preferences.max_pomodoros_per_day
        if ratio <= 0.1:
            return GapSeverity.MINOR
        if ratio <= 0.25:
            return GapSeverity.MODERATE
        if ratio <= 0.5:
            return GapSeverity.SEVERE
        return GapSeverity.CRITICAL

    @staticmethod
    def _prediction_risks(daily, gaps, total_demand, total_capacity) -> list[CapacityRisk]:
        risks = []
        if gaps:
            worst = max(gaps, key=lambda g: g.gap_size).severity
            impact = {
                GapSeverity.MINOR: "low",
                GapSeverity.MODERATE: "medium",
                GapSeverity.SEVERE: "high",
                GapSeverity.CRITICAL: "critical",
            }[worst]
            risks.append(
                CapacityRisk(
                    type="overload",
                    probability=len(gaps) / len(daily),
                    impact=impact,
                    description=f"Demand exceeds capacity on {len(gaps)} day(s)",
                    mitigation=["Extend deadlines", "Reduce scope", "Add working days"],
                )
            )
        if total_capacity and total_demand < total_capacity * LIGHT_UTILIZATION:
            risks.append(
                CapacityRisk(
                    type="underutilization",
                    probability=0.5,
                    impact="low",
                    description="Less than a third of available capacity is needed",
                    mitigation=["Pull upcoming work forward"],
                )
            )
        demands = [p.predicted_demand for p in daily]
        mean_demand = statistics.fmean(demands) if demands else 0.0
        if mean_demand > 0 and max(demands) > 2 * mean_demand:
            risks.append(
                CapacityRisk(
                    type="imbalance",
                    probability=0.6,
                    impact="medium",
                    description="Demand is concentrated on a few days",
                    mitigation=["Start long tasks earlier to spread their load"],
                )
            )
        return risks


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))
