"""Capacity management - per-day budgets, allocation and utilization health."""

from focusplan.capacity.manager import CapacityManager
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
    ConstraintField,
    ConstraintOperator,
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

__all__ = [
    "CapacityManager",
    # Views
    "DateRange",
    "TimeBand",
    "DailyCapacity",
    "WeeklyCapacity",
    "MonthlyCapacity",
    "LoadDistribution",
    "CapacityRecommendation",
    # Allocation
    "AllocationConstraint",
    "ConstraintField",
    "ConstraintOperator",
    "ConstraintType",
    "Flexibility",
    "CapacityAllocationRequest",
    "CapacityAllocationResult",
    "AlternativeAllocation",
    # Analysis
    "BandDistribution",
    "CapacityHealthMetrics",
    "CapacityUtilizationAnalysis",
    "HealthFlag",
    "HealthRating",
    # Prediction
    "CapacityPrediction",
    "DailyDemandPrediction",
    "CapacityGap",
    "CapacityRisk",
    "GapSeverity",
]
