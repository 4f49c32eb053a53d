"""Deep Agent Pipeline - decompose, execute and synthesize a complex query."""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Deque, Dict, Optional

from concierge.core.complexity import ComplexityAnalysis
from concierge.core.decomposer import TaskDecomposer
from concierge.core.executor import TaskExecutor
from concierge.core.schemas import DeepAgentSession, SessionStatus
from concierge.core.synthesizer import SynthesisResult, Synthesizer

logger = logging.getLogger(__name__)


@dataclass
class DeepOutcome:
    session: DeepAgentSession
    synthesis: SynthesisResult

    @property
    def content(self) -> str:
        return self.synthesis.content


class DeepAgentPipeline:
    """Runs the deep path and keeps a bounded ring of recent sessions"""

    def __init__(
        self,
        decomposer: TaskDecomposer,
        executor: TaskExecutor,
        synthesizer: Synthesizer,
        history_size: int = 50,
    ):
        self.decomposer = decomposer
        self.executor = executor
        self.synthesizer = synthesizer
        self._recent: Deque[DeepAgentSession] = deque(maxlen=history_size)

    async def run(self, query: str, analysis: ComplexityAnalysis) -> DeepOutcome:
        session = DeepAgentSession(original_query=query)
        session.reasoning_log.append(f"Initiated deep processing: {analysis.reasoning}")
        session.tasks = self.decomposer.decompose(analysis)
        self._recent.append(session)

        await self.executor.execute(session)

        session.status = SessionStatus.SYNTHESIZING
        synthesis = await self.synthesizer.synthesize(session)

        session.status = SessionStatus.COMPLETED
        session.end_time = datetime.now()
        progress = session.get_progress()
        logger.info(
            f"🧠 Deep session {session.id} finished: "
            f"{progress['completed']}/{progress['total']} tasks, fallback={synthesis.fallback}"
        )
        return DeepOutcome(session=session, synthesis=synthesis)

    def get_session(self, session_id: str) -> Optional[DeepAgentSession]:
        for session in self._recent:
            if session.id == session_id:
                return session
        return None

    def get_session_stats(self) -> Dict[str, Any]:
        """Totals, average processing time and success rate over recent sessions"""
        sessions = list(self._recent)
        completed = [s for s in sessions if s.status == SessionStatus.COMPLETED]
        successful = [s for s in completed if len(s.completed_tasks) == len(s.tasks)]

        return {
            "total": len(sessions),
            "active": sum(1 for s in sessions if s.status in (SessionStatus.PLANNING, SessionStatus.EXECUTING)),
            "completed": len(completed),
            "average_processing_time_ms": (
                sum(s.processing_time_ms for s in completed) / len(completed) if completed else 0.0
            ),
            "success_rate": len(successful) / len(completed) if completed else 0.0,
        }
