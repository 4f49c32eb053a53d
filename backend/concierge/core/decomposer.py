"""Task Decomposition Engine - rule-based task graph construction."""

import logging
from typing import List

from concierge.core.complexity import ComplexityAnalysis
from concierge.core.schemas import DeepTask, TaskType

logger = logging.getLogger(__name__)

SYNTHESIS_TASK_ID = "task-final"


class TaskDecomposer:
    """Build a DAG of tasks for a complex query

    The graph always ends with exactly one synthesis task that depends on
    every other task.
    """

    def decompose(self, analysis: ComplexityAnalysis) -> List[DeepTask]:
        tasks: List[DeepTask] = []

        if analysis.multiple_questions:
            tasks.append(DeepTask(
                id="task-1",
                description="Break down multi-part question",
                type=TaskType.ANALYSIS,
                priority=1,
            ))

        if analysis.needs_research:
            tasks.append(DeepTask(
                id="task-2",
                description="Conduct research and analysis",
                type=TaskType.RESEARCH,
                priority=2,
                dependencies=[tasks[0].id] if tasks else [],
            ))

        if analysis.domain_keywords:
            tasks.append(DeepTask(
                id="task-3",
                description="Apply domain-specific expertise",
                type=TaskType.ANALYSIS,
                priority=3,
                dependencies=[tasks[-1].id] if tasks else [],
            ))

        tasks.append(DeepTask(
            id=SYNTHESIS_TASK_ID,
            description="Synthesize findings into comprehensive response",
            type=TaskType.SYNTHESIS,
            priority=10,
            dependencies=[t.id for t in tasks],
        ))

        logger.info(f"🧩 Decomposed query into {len(tasks)} tasks: {[t.id for t in tasks]}")
        return tasks
