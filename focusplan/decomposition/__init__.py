"""Task decomposition - complexity scoring and subtask suggestions.

This module provides:
- Complexity analysis (task -> score, category, suggestions)
- Task-type classification (text -> template id)
- Subtask decomposition (task -> ordered subtask chain)
"""

from focusplan.decomposition.classifier import (
    BUILD_TEMPLATE,
    DESIGN_TEMPLATE,
    GENERIC_TEMPLATE,
    TEMPLATES,
    DecompositionTemplate,
    KeywordTaskClassifier,
    TaskTypeClassifier,
)
from focusplan.decomposition.complexity import (
    ComplexityAnalyzer,
    ComplexityCategory,
    ComplexityFactors,
    TaskComplexity,
)
from focusplan.decomposition.decomposer import SubtaskDecomposer

__all__ = [
    # Complexity
    "ComplexityAnalyzer",
    "ComplexityCategory",
    "ComplexityFactors",
    "TaskComplexity",
    # Classification
    "TaskTypeClassifier",
    "KeywordTaskClassifier",
    "DecompositionTemplate",
    "DESIGN_TEMPLATE",
    "BUILD_TEMPLATE",
    "GENERIC_TEMPLATE",
    "TEMPLATES",
    # Decomposition
    "SubtaskDecomposer",
]
