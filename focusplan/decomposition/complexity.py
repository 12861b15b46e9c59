"""Task complexity scoring.

Scores a task from four factors in [0, 1] and maps the mean onto a
category used to decide whether the task should be decomposed.
"""

from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from focusplan.core.models import Task

# Signals that a task involves design, engineering or analysis work.
COMPLEX_KEYWORDS = (
    "設計",
    "開發",
    "架構",
    "優化",
    "分析",
    "系統",
    "design",
    "develop",
    "architect",
    "optimi",
    "analy",
    "system",
)

SIZE_NORMALIZER = 20
TEXT_LENGTH_NORMALIZER = 50


class ComplexityCategory(str, Enum):
    """Coarse difficulty band."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    EXPERT = "expert"


class ComplexityFactors(BaseModel):
    """Individual scoring factors, each in [0, 1]."""

    size: float = Field(ge=0.0, le=1.0)
    text: float = Field(ge=0.0, le=1.0)
    dependency: float = Field(ge=0.0, le=1.0)
    uncertainty: float = Field(ge=0.0, le=1.0)

    def mean(self) -> float:
        return (self.size + self.text + self.dependency + self.uncertainty) / 4


class TaskComplexity(BaseModel):
    """Result of complexity analysis."""

    score: float = Field(ge=0.0, le=1.0)
    factors: ComplexityFactors
    category: ComplexityCategory
    suggestions: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "TaskComplexity":
        """Neutral placeholder for tasks that were never analyzed."""
        return cls(
            score=0.0,
            factors=ComplexityFactors(size=0, text=0, dependency=0, uncertainty=0),
            category=ComplexityCategory.SIMPLE,
        )


class ComplexityAnalyzer:
    """
    Estimate how hard a task is from its size and description.

    Example:
        >>> analyzer = ComplexityAnalyzer()
        >>> result = analyzer.analyze(Task(text="Fix typo", estimated_units=1))
        >>> result.category
        <ComplexityCategory.SIMPLE: 'simple'>
    """

    def __init__(self, keywords: tuple[str, ...] = COMPLEX_KEYWORDS) -> None:
        self.keywords = keywords

    def analyze(self, task: Task) -> TaskComplexity:
        size = min(task.estimated_units / SIZE_NORMALIZER, 1.0)
        factors = ComplexityFactors(
            size=size,
            text=self.text_score(task.text),
            dependency=0.8 if task.subtasks else 0.2,
            uncertainty=size * 0.5,
        )
        score = factors.mean()
        category = self.categorize(score)

        logger.debug(
            f"Complexity for '{task.text}': {score:.2f} ({category.value}), factors={factors}"
        )

        return TaskComplexity(
            score=score,
            factors=factors,
            category=category,
            suggestions=self._suggestions(category, score),
        )

    def text_score(self, text: str) -> float:
        """Keyword heuristic over the task text."""
        lowered = text.lower()
        length_score = min(len(text) / TEXT_LENGTH_NORMALIZER, 1.0)
        if any(keyword in lowered for keyword in self.keywords):
            return max(0.6, length_score)
        return length_score * 0.5

    @staticmethod
    def categorize(score: float) -> ComplexityCategory:
        if score < 0.3:
            return ComplexityCategory.SIMPLE
        if score < 0.6:
            return ComplexityCategory.MODERATE
        if score < 0.8:
            return ComplexityCategory.COMPLEX
        return ComplexityCategory.EXPERT

    @staticmethod
    def _suggestions(category: ComplexityCategory, score: float) -> list[str]:
        suggestions = []
        if category in (ComplexityCategory.COMPLEX, ComplexityCategory.EXPERT):
            suggestions.append("Break the task into several subtasks")
            suggestions.append("Reserve extra buffer time")
        if score > 0.7:
            suggestions.append("Schedule it during your peak energy hours")
        if category == ComplexityCategory.SIMPLE:
            suggestions.append("Batch it together with other small tasks")
        return suggestions
