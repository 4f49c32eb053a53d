"""Task Executor - dependency-ordered execution of a deep session's tasks.

Makes a single linear pass over the task list. A task runs only when all of
its dependencies are completed; otherwise it is skipped for this pass and
stays pending. Failures are recorded in the reasoning log and execution
continues with the next task.
"""

import logging
from typing import Dict, List, Optional

from concierge.core.schemas import DeepAgentSession, DeepTask, SessionStatus, TaskResult, TaskStatus
from concierge.errors import ProviderError
from concierge.llm.base import LLMConfig

logger = logging.getLogger(__name__)

TASK_TEMPERATURE = 0.6
TASK_MAX_TOKENS = 1500


def build_task_prompt(task: DeepTask, session: DeepAgentSession) -> List[Dict[str, str]]:
    """System and user messages for one task"""
    previous = "\n\n".join(r.content for r in session.results) or "None yet."
    system_prompt = f"""You are a specialized assistant working on one part of a complex, multi-step query.

Task Type: {task.type.value}
Task Description: {task.description}
Priority: {task.priority}

Previous Results:
{previous}

Focus on this specific task. Your output will be combined with the other task results into a single answer."""

    user_prompt = f"""Original Query: {session.original_query}

Current Task: {task.description}

Provide a detailed, accurate response for this aspect of the query."""

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


class TaskExecutor:
    """Runs deep tasks against the LLM service"""

    def __init__(self, llm_service, model: Optional[str] = None, preferred_provider: Optional[str] = None):
        self.llm_service = llm_service
        self.model = model
        self.preferred_provider = preferred_provider

    async def execute(self, session: DeepAgentSession) -> DeepAgentSession:
        """Execute every runnable task once, in list order"""
        session.status = SessionStatus.EXECUTING

        for task in session.tasks:
            if not session.dependencies_met(task):
                logger.info(f"⏭️ Skipping {task.id}: dependencies not met")
                session.reasoning_log.append(f"Skipped: {task.description} (dependencies not met)")
                continue

            session.reasoning_log.append(f"Executing: {task.description}")
            task.status = TaskStatus.IN_PROGRESS

            try:
                result = await self._run_task(task, session)
            except ProviderError as e:
                task.status = TaskStatus.FAILED
                session.reasoning_log.append(f"Task failed: {e}")
                logger.warning(f"⚠️ Task {task.id} failed: {e}")
                continue

            task.result = result
            task.status = TaskStatus.COMPLETED
            session.results.append(result)
            logger.info(f"✅ Task {task.id} completed")

        return session

    async def _run_task(self, task: DeepTask, session: DeepAgentSession) -> TaskResult:
        response = await self.llm_service.generate(
            self.model,
            build_task_prompt(task, session),
            LLMConfig(
                temperature=TASK_TEMPERATURE,
                max_tokens=TASK_MAX_TOKENS,
                preferred_provider=self.preferred_provider,
            ),
        )
        return TaskResult(
            task_id=task.id,
            content=response.content,
            reasoning=f"Completed {task.type.value} task: {task.description}",
            processing_time_ms=response.processing_time_ms,
        )
