"""Task-type classification for decomposition templates."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DecompositionTemplate:
    """Named phases and the share of units each receives."""

    id: str
    phases: tuple[tuple[str, float], ...]


DESIGN_TEMPLATE = DecompositionTemplate(
    id="design",
    phases=(
        ("Research and requirements", 0.2),
        ("Concept sketches", 0.3),
        ("Detailed design and prototype", 0.4),
        ("Design review and adjustments", 0.1),
    ),
)

BUILD_TEMPLATE = DecompositionTemplate(
    id="build",
    phases=(
        ("Requirements and architecture", 0.25),
        ("Core implementation", 0.5),
        ("Testing and debugging", 0.2),
        ("Documentation and release", 0.05),
    ),
)

GENERIC_TEMPLATE = DecompositionTemplate(
    id="generic",
    phases=(
        ("Preparation and planning", 0.25),
        ("Core execution", 0.5),
        ("Review and polish", 0.25),
    ),
)

TEMPLATES = {t.id: t for t in (DESIGN_TEMPLATE, BUILD_TEMPLATE, GENERIC_TEMPLATE)}


class TaskTypeClassifier(Protocol):
    """Maps task text to a template id from ``TEMPLATES``."""

    def classify(self, text: str) -> str: ...


class KeywordTaskClassifier:
    """Keyword matcher; design keywords win over build keywords."""

    DESIGN_KEYWORDS = ("設計", "design")
    BUILD_KEYWORDS = ("開發", "實作", "develop", "build", "implement")

    def classify(self, text: str) -> str:
        lowered = text.lower()
        if any(k in lowered for k in self.DESIGN_KEYWORDS):
            return DESIGN_TEMPLATE.id
        if any(k in lowered for k in self.BUILD_KEYWORDS):
            return BUILD_TEMPLATE.id
        return GENERIC_TEMPLATE.id
