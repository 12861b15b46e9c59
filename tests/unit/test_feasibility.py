"""
Unit tests for the FeasibilityEvaluator.
"""

from datetime import date, datetime, timedelta

import pytest

from focusplan.capacity.manager import CapacityManager
from focusplan.core.models import Preferences, Task
from focusplan.feasibility import (
    MITIGATIONS,
    FeasibilityEvaluator,
    RiskFactorType,
    RiskLevel,
)

TUESDAY = date(2026, 10, 20)


@pytest.fixture
def evaluator():
    return FeasibilityEvaluator()


@pytest.fixture
def small_task():
    return Task(text="Write report", estimated_units=4)


@pytest.fixture
def tuesday_slot(make_slot):
    """Ends Tuesday 10:00."""
    return make_slot("s", "09:35", "10:00")


# =============================================================================
# CONFIDENCE
# =============================================================================


class TestConfidence:
    """Tests for the confidence bands."""

    END = datetime(2026, 10, 20, 10, 0)

    @pytest.mark.parametrize(
        "buffer,expected",
        [
            (timedelta(days=2), 0.95),
            (timedelta(days=1), 0.95),
            (timedelta(hours=12), 0.85),
            (timedelta(hours=1), 0.75),
            (timedelta(0), 0.75),
            (timedelta(minutes=-1), 0.3),
        ],
    )
    def test_bands(self, buffer, expected):
        assert FeasibilityEvaluator.confidence_for(self.END, self.END + buffer) == expected

    def test_no_completion(self):
        assert FeasibilityEvaluator.confidence_for(None, self.END) == 0.0


class TestCompletion:
    """Tests for the completion estimate."""

    def test_last_slot_end(self, make_slot):
        slots = [make_slot("a", "09:00"), make_slot("b", "14:00", day=date(2026, 10, 22))]
        assert FeasibilityEvaluator.completion_of(slots) == datetime(2026, 10, 22, 14, 25)

    def test_no_slots(self):
        assert FeasibilityEvaluator.completion_of([]) is None

    def test_unplaced_units_push_completion(self, tuesday_slot):
        completion = FeasibilityEvaluator.completion_of([tuesday_slot], unplaced_units=13, daily_capacity=6)
        assert completion == datetime(2026, 10, 23, 10, 0)


# =============================================================================
# EVALUATE
# =============================================================================


class TestEvaluate:
    """Tests for FeasibilityEvaluator.evaluate."""

    def test_comfortable(self, evaluator, small_task, tuesday_slot):
        report = evaluator.evaluate([tuesday_slot], datetime(2026, 10, 29, 8, 0), small_task)

        assert report.confidence == 0.95
        assert report.meets_deadline
        assert report.buffer_days == pytest.approx(8.916666, rel=1e-4)
        assert report.risk.overall == RiskLevel.LOW
        assert report.risk.factors == []
        assert report.risk.mitigation == list(MITIGATIONS)

    def test_no_slots(self, evaluator, small_task):
        report = evaluator.evaluate([], datetime(2026, 10, 29, 8, 0), small_task)

        assert report.confidence == 0.0
        assert report.completion is None
        assert not report.meets_deadline
        assert report.risk.overall == RiskLevel.HIGH

    def test_unplaced_units_reach_deadline(self, evaluator, small_task, tuesday_slot):
        report = evaluator.evaluate(
            [tuesday_slot],
            datetime(2026, 10, 23, 10, 0),
            small_task,
            unplaced_units=13,
            daily_capacity=6,
        )
        assert report.confidence == 0.75
        assert report.buffer_days == 0


class TestAssessRisk:
    """Tests for risk factors."""

    def test_past_deadline(self, evaluator, small_task):
        risk = evaluator.assess_risk(small_task, buffer_days=-0.5)

        assert risk.overall == RiskLevel.HIGH
        factor = risk.factors[0]
        assert factor.type == RiskFactorType.TIGHT_DEADLINE
        assert factor.probability == pytest.approx(0.8)

    def test_less_than_a_day(self, evaluator, small_task):
        risk = evaluator.assess_risk(small_task, buffer_days=0.5)

        assert risk.overall == RiskLevel.MEDIUM
        assert risk.factors[0].probability == pytest.approx(0.4)

    def test_high_complexity_threshold(self, evaluator):
        assert evaluator.assess_risk(Task(text="Big", estimated_units=15), 3).factors == []

        risk = evaluator.assess_risk(Task(text="Big", estimated_units=16), 3)
        assert [f.type for f in risk.factors] == [RiskFactorType.HIGH_COMPLEXITY]
        assert risk.factors[0].probability == pytest.approx(0.3)
        assert risk.overall == RiskLevel.MEDIUM

    def test_custom_complexity_threshold(self):
        risk = FeasibilityEvaluator(high_complexity_units=5).assess_risk(
            Task(text="Mid", estimated_units=6), 3
        )
        assert [f.type for f in risk.factors] == [RiskFactorType.HIGH_COMPLEXITY]

    def test_capacity_overload(self, evaluator, small_task, make_slot):
        slots = [
            make_slot("m", "09:00", "12:25", units=7),
            make_slot("n", "13:00", "16:25", units=7),
        ]
        analysis = CapacityManager(Preferences(), existing_slots=slots).analyze_utilization(
            TUESDAY, TUESDAY
        )

        risk = evaluator.assess_risk(small_task, 3, analysis)

        assert [f.type for f in risk.factors] == [RiskFactorType.CAPACITY_OVERLOAD]
        assert risk.factors[0].probability == pytest.approx(0.5)

    def test_overall_is_most_severe(self, evaluator):
        risk = evaluator.assess_risk(Task(text="Big", estimated_units=20), -1)
        assert {f.type for f in risk.factors} == {
            RiskFactorType.TIGHT_DEADLINE,
            RiskFactorType.HIGH_COMPLEXITY,
        }
        assert risk.overall == RiskLevel.HIGH
