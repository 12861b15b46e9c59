"""Planning - strategy selection and slot allocation."""

from focusplan.planning.allocator import AllocationOutcome, SlotAllocator
from focusplan.planning.strategy import (
    DistributionStrategy,
    ExperienceTier,
    Level,
    StrategyConditions,
    StrategyOutcomes,
    StrategyParameters,
    StrategySelector,
    StrategyType,
    default_strategy,
    even_strategy,
    front_loaded_strategy,
)

__all__ = [
    # Strategy
    "DistributionStrategy",
    "StrategyType",
    "StrategyParameters",
    "StrategyConditions",
    "StrategyOutcomes",
    "StrategySelector",
    "Level",
    "ExperienceTier",
    "even_strategy",
    "front_loaded_strategy",
    "default_strategy",
    # Allocation
    "SlotAllocator",
    "AllocationOutcome",
]
