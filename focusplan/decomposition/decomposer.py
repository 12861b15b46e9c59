"""Split oversized tasks into an ordered chain of subtasks."""

import math

from loguru import logger

from focusplan.core.models import Subtask, Task
from focusplan.decomposition.classifier import (
    GENERIC_TEMPLATE,
    TEMPLATES,
    KeywordTaskClassifier,
    TaskTypeClassifier,
)

DEFAULT_THRESHOLD = 4


class SubtaskDecomposer:
    """
    Proportionally divide a task's units across template phases.

    The unit total of the returned subtasks always equals the task's
    estimate; rounding drift is absorbed by the largest subtask.

    Example:
        >>> decomposer = SubtaskDecomposer()
        >>> subtasks = decomposer.decompose(
        ...     Task(id="t1", text="Design landing page", estimated_units=10)
        ... )
        >>> [s.estimated_units for s in subtasks]
        [2, 3, 4, 1]
    """

    def __init__(
        self,
        threshold: int = DEFAULT_THRESHOLD,
        classifier: TaskTypeClassifier | None = None,
    ) -> None:
        self.threshold = threshold
        self.classifier = classifier or KeywordTaskClassifier()

    def should_decompose(self, task: Task) -> bool:
        return task.estimated_units > self.threshold and not task.is_subdivided

    def decompose(self, task: Task) -> list[Subtask]:
        """Return suggested subtasks, or an empty list if none apply."""
        if not self.should_decompose(task):
            return []

        template_id = self.classifier.classify(task.text)
        template = TEMPLATES.get(template_id)
        if template is None:
            logger.warning(f"Unknown template '{template_id}', using generic")
            template = GENERIC_TEMPLATE

        total = task.estimated_units
        # round() first so 10 * 0.3 == 3.0000000000000004 does not ceil to 4
        allocations = [math.ceil(round(total * ratio, 9)) for _, ratio in template.phases]

        drift = total - sum(allocations)
        if drift:
            largest = max(range(len(allocations)), key=lambda i: allocations[i])
            allocations[largest] += drift

        subtasks = []
        for order, ((name, _), units) in enumerate(zip(template.phases, allocations), start=1):
            subtasks.append(
                Subtask(
                    id=self.subtask_id(task.id, order),
                    parent_task_id=task.id,
                    name=name,
                    estimated_units=units,
                    order=order,
                    dependencies=[self.subtask_id(task.id, order - 1)] if order > 1 else [],
                )
            )

        logger.info(
            f"Decomposed '{task.text}' into {len(subtasks)} subtasks "
            f"using {template.id} template: {allocations}"
        )
        return subtasks

    @staticmethod
    def subtask_id(task_id: str, order: int) -> str:
        return f"subtask-{task_id}-{order}"
