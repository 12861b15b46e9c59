"""Feasibility - deadline confidence and risk assessment."""

from focusplan.feasibility.evaluator import (
    MITIGATIONS,
    FeasibilityEvaluator,
    FeasibilityReport,
    RiskAssessment,
    RiskFactor,
    RiskFactorType,
    RiskLevel,
)

__all__ = [
    "FeasibilityEvaluator",
    "FeasibilityReport",
    "RiskAssessment",
    "RiskFactor",
    "RiskFactorType",
    "RiskLevel",
    "MITIGATIONS",
]
