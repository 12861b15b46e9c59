"""
Unit tests for distribution strategy selection.
"""

import pytest

from focusplan.core.models import Task
from focusplan.planning.strategy import (
    Level,
    StrategySelector,
    StrategyType,
    default_strategy,
    even_strategy,
    front_loaded_strategy,
)


@pytest.fixture
def selector():
    return StrategySelector()


def _task(units: int) -> Task:
    return Task(text="Write report", estimated_units=units)


class TestStrategyFactories:
    """Tests for the strategy constructors."""

    def test_even(self):
        strategy = even_strategy(daily_capacity=6, available_days=10)
        assert strategy.type == StrategyType.EVEN
        assert strategy.name == "Even distribution"
        assert strategy.parameters.buffer_percentage == 15
        assert strategy.parameters.max_slot_size == 6
        assert strategy.outcomes.completion_rate == pytest.approx(0.85)
        assert strategy.outcomes.suitability == pytest.approx(0.9)
        assert strategy.outcomes.stress_level == Level.LOW

    def test_even_caps_slot_size(self):
        assert even_strategy(daily_capacity=4, available_days=5).parameters.max_slot_size == 4
        assert even_strategy(daily_capacity=12, available_days=5).parameters.max_slot_size == 6

    def test_front_loaded(self):
        strategy = front_loaded_strategy(daily_capacity=6, available_days=3)
        assert strategy.type == StrategyType.FRONT_LOADED
        assert strategy.parameters.front_load_ratio == pytest.approx(0.7)
        assert strategy.parameters.buffer_percentage == 20
        assert strategy.parameters.min_slot_size == 2
        assert strategy.outcomes.stress_level == Level.MEDIUM
        assert strategy.outcomes.suitability == pytest.approx(0.7)

    def test_default(self):
        strategy = default_strategy()
        assert strategy.type == StrategyType.EVEN
        assert strategy.name == "Default even distribution"
        assert strategy.parameters.buffer_percentage == 10
        assert strategy.outcomes.completion_rate == pytest.approx(0.8)

    def test_other(self):
        assert StrategyType.EVEN.other == StrategyType.FRONT_LOADED
        assert StrategyType.FRONT_LOADED.other == StrategyType.EVEN


class TestStrategySelector:
    """Tests for StrategySelector.select."""

    def test_required_days(self):
        assert StrategySelector.required_days(4, 6) == 1
        assert StrategySelector.required_days(20, 6) == 4
        assert StrategySelector.required_days(12, 6) == 2

    def test_plenty_of_time_is_even(self, selector):
        strategy = selector.select(_task(4), available_days=10, daily_capacity=6)
        assert strategy.type == StrategyType.EVEN
        assert strategy.name == "Even distribution"

    def test_tight_window_is_front_loaded(self, selector):
        strategy = selector.select(_task(20), available_days=3, daily_capacity=6)
        assert strategy.type == StrategyType.FRONT_LOADED

    def test_in_between_is_default(self, selector):
        strategy = selector.select(_task(20), available_days=5, daily_capacity=6)
        assert strategy.name == "Default even distribution"

    def test_even_boundary_inclusive(self, selector):
        """Test exactly 1.5x the required days selects even."""
        strategy = selector.select(_task(12), available_days=3, daily_capacity=6)
        assert strategy.type == StrategyType.EVEN

    def test_front_loaded_boundary_inclusive(self, selector):
        """Test exactly 1.2x the required days selects front-loaded."""
        strategy = selector.select(_task(30), available_days=6, daily_capacity=6)
        assert strategy.type == StrategyType.FRONT_LOADED

    def test_no_days_is_front_loaded(self, selector):
        strategy = selector.select(_task(4), available_days=0, daily_capacity=6)
        assert strategy.type == StrategyType.FRONT_LOADED

    def test_build(self, selector):
        assert selector.build(StrategyType.EVEN, 6, 3).name == "Even distribution"
        assert selector.build(StrategyType.FRONT_LOADED, 6, 3).name == "Front-loaded distribution"
