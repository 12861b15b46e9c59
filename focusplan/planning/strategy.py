"""Distribution strategies and their selection.

A strategy describes how a task's units are spread across the days
before its deadline. ``StrategySelector`` compares the days available
with the days the task needs at full daily capacity.
"""

import math
from enum import Enum

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from focusplan.core.models import Task


class StrategyType(str, Enum):
    """How units are distributed across days."""

    EVEN = "even"
    FRONT_LOADED = "front_loaded"

    @property
    def other(self) -> "StrategyType":
        """The opposite strategy, used for alternative schedules."""
        if self == StrategyType.EVEN:
            return StrategyType.FRONT_LOADED
        return StrategyType.EVEN


class Level(str, Enum):
    """Qualitative low/medium/high rating."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ExperienceTier(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class StrategyParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    front_load_ratio: float | None = Field(default=None, ge=0.0, le=1.0)
    buffer_percentage: int = Field(default=10, ge=0, le=100)
    allow_splitting: bool = True
    min_slot_size: int = Field(default=1, ge=1)
    max_slot_size: int = Field(default=6, ge=1)
    prefer_morning: bool = False
    prefer_afternoon: bool = False
    prefer_evening: bool = False


class StrategyConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_task_size: int = 1
    max_task_size: int = 20
    available_days: int = 7
    experience: ExperienceTier = ExperienceTier.BEGINNER
    task_types: tuple[str, ...] = ("general",)


class StrategyOutcomes(BaseModel):
    model_config = ConfigDict(frozen=True)

    completion_rate: float = Field(ge=0.0, le=1.0)
    stress_level: Level
    flexibility: Level
    risk_level: Level
    suitability: float = Field(ge=0.0, le=1.0)


class DistributionStrategy(BaseModel):
    """A named distribution policy with everything downstream needs."""

    model_config = ConfigDict(frozen=True)

    type: StrategyType
    name: str
    description: str
    parameters: StrategyParameters
    conditions: StrategyConditions
    outcomes: StrategyOutcomes


# =============================================================================
# STRATEGY FACTORIES
# =============================================================================


def even_strategy(daily_capacity: int, available_days: int) -> DistributionStrategy:
    """Spread work evenly when there is plenty of time."""
    return DistributionStrategy(
        type=StrategyType.EVEN,
        name="Even distribution",
        description="Spread the work evenly across available days to keep daily load low",
        parameters=StrategyParameters(
            buffer_percentage=15,
            allow_splitting=True,
            min_slot_size=1,
            max_slot_size=min(6, daily_capacity),
            prefer_morning=True,
        ),
        conditions=StrategyConditions(
            min_task_size=1,
            max_task_size=50,
            available_days=available_days,
            experience=ExperienceTier.INTERMEDIATE,
            task_types=("general",),
        ),
        outcomes=StrategyOutcomes(
            completion_rate=0.85,
            stress_level=Level.LOW,
            flexibility=Level.HIGH,
            risk_level=Level.LOW,
            suitability=0.9,
        ),
    )


def front_loaded_strategy(daily_capacity: int, available_days: int) -> DistributionStrategy:
    """Push most of the work into the first part of a tight window."""
    return DistributionStrategy(
        type=StrategyType.FRONT_LOADED,
        name="Front-loaded distribution",
        description="Finish most of the work early and keep later days as buffer",
        parameters=StrategyParameters(
            front_load_ratio=0.7,
            buffer_percentage=20,
            allow_splitting=True,
            min_slot_size=2,
            max_slot_size=daily_capacity,
            prefer_morning=True,
            prefer_afternoon=True,
        ),
        conditions=StrategyConditions(
            min_task_size=3,
            max_task_size=50,
            available_days=available_days,
            experience=ExperienceTier.INTERMEDIATE,
            task_types=("urgent",),
        ),
        outcomes=StrategyOutcomes(
            completion_rate=0.75,
            stress_level=Level.MEDIUM,
            flexibility=Level.MEDIUM,
            risk_level=Level.MEDIUM,
            suitability=0.7,
        ),
    )


def default_strategy() -> DistributionStrategy:
    """Conservative even distribution used when neither rule applies."""
    return DistributionStrategy(
        type=StrategyType.EVEN,
        name="Default even distribution",
        description="Standard even distribution of time",
        parameters=StrategyParameters(
            buffer_percentage=10,
            allow_splitting=True,
            min_slot_size=1,
            max_slot_size=6,
        ),
        conditions=StrategyConditions(),
        outcomes=StrategyOutcomes(
            completion_rate=0.8,
            stress_level=Level.MEDIUM,
            flexibility=Level.MEDIUM,
            risk_level=Level.MEDIUM,
            suitability=0.7,
        ),
    )


# =============================================================================
# SELECTOR
# =============================================================================


class StrategySelector:
    """
    Pick a distribution strategy from available vs. required days.

    Example:
        >>> selector = StrategySelector()
        >>> selector.select(Task(text="Write report", estimated_units=4), 10, 6).type
        <StrategyType.EVEN: 'even'>
    """

    EVEN_RATIO = 1.5
    FRONT_LOADED_RATIO = 1.2

    @staticmethod
    def required_days(units: int, daily_capacity: int) -> int:
        return math.ceil(units / max(1, daily_capacity))

    def select(self, task: Task, available_days: int, daily_capacity: int) -> DistributionStrategy:
        required = self.required_days(task.estimated_units, daily_capacity)

        if available_days >= required * self.EVEN_RATIO:
            strategy = even_strategy(daily_capacity, available_days)
        elif available_days <= required * self.FRONT_LOADED_RATIO:
            strategy = front_loaded_strategy(daily_capacity, available_days)
        else:
            strategy = default_strategy()

        logger.info(
            f"Selected '{strategy.name}' for '{task.text}' "
            f"(available={available_days}d, required={required}d)"
        )
        return strategy

    @staticmethod
    def build(
        strategy_type: StrategyType, daily_capacity: int, available_days: int
    ) -> DistributionStrategy:
        """Construct a specific strategy type, bypassing selection."""
        if strategy_type == StrategyType.FRONT_LOADED:
            return front_loaded_strategy(daily_capacity, available_days)
        return even_strategy(daily_capacity, available_days)
