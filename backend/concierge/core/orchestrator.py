"""Agent Orchestrator - the single entry point for a conversational turn.

Flow per turn:
1. Append the user message to history
2. Count the normalized message for repetition hints
3. Score complexity
4. Simple path: select a responder and generate a reply
   Deep path: decompose, execute and synthesize
5. Append the reply to history, then update conversation state. This step
   also runs when an earlier step fails and the reply is the error reply

Turns of the same session run one at a time in arrival order; different
sessions proceed concurrently. ``process_message`` never raises.
"""
import asyncio
import logging
import time
import uuid
from collections import defaultdict, deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Deque, Dict, List, Optional

from concierge.config import Settings
from concierge.core.catalog import build_default_registry
from concierge.core.complexity import ComplexityAnalyzer
from concierge.core.conversation_state import ConversationState, ConversationStateTracker
from concierge.core.decomposer import TaskDecomposer
from concierge.core.deep_agent import DeepAgentPipeline
from concierge.core.executor import TaskExecutor
from concierge.core.history import HistoryManager, InMemorySessionLog, JsonlSessionLog, Message
from concierge.core.registry import CapabilityRegistry
from concierge.core.selector import AgentSelector
from concierge.core.synthesizer import Synthesizer
from concierge.llm.service import LLMService
from concierge.responders.base import Responder, ResponderContext, build_responders
from concierge.tools import ToolRegistry, build_default_tools

logger = logging.getLogger(__name__)

DEEP_AGENT_ID = "deep-agent"
HEALTH_WINDOW = 20
ERROR_REPLY = "I'm sorry, something went wrong while handling your message. Please try again in a moment."


@dataclass
class TurnContext:
    """Caller-supplied identity for a turn"""
    session_id: str = field(default_factory=lambda: f"session-{uuid.uuid4().hex[:12]}")
    user_id: str = "anonymous"
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AssistantMessage:
    """Reply returned to the caller for every turn"""
    content: str
    agent_id: str
    id: str = field(default_factory=lambda: f"msg-{uuid.uuid4().hex[:12]}")
    role: str = "assistant"
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def degraded(self) -> bool:
        return bool(self.metadata.get("error"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "agent_id": self.agent_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


@dataclass
class Session:
    session_id: str
    user_id: str
    current_responder_id: Optional[str] = None
    start_time: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)
    message_count: int = 0

    def is_active(self, idle_threshold: timedelta, now: Optional[datetime] = None) -> bool:
        return ((now or datetime.now()) - self.last_activity) < idle_threshold

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "current_responder_id": self.current_responder_id,
            "start_time": self.start_time.isoformat(),
            "last_activity": self.last_activity.isoformat(),
            "message_count": self.message_count,
        }


class AgentOrchestrator:
    """Routes messages to responders or the deep pipeline and keeps session state

    Attributes:
        registry: Sealed capability registry
        selector: Responder scoring
        history: Per-session message logs
        state_tracker: Per-session conversation state
        analyzer: Complexity scoring
        deep_pipeline: Decompose/execute/synthesize path
        responders: Responder per registered id
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        responders: Dict[str, Responder],
        deep_pipeline: DeepAgentPipeline,
        history: Optional[HistoryManager] = None,
        state_tracker: Optional[ConversationStateTracker] = None,
        analyzer: Optional[ComplexityAnalyzer] = None,
        selector: Optional[AgentSelector] = None,
        inactive_after: timedelta = timedelta(minutes=30),
    ):
        self.registry = registry
        self.responders = responders
        self.deep_pipeline = deep_pipeline
        self.history = history or HistoryManager()
        self.state_tracker = state_tracker or ConversationStateTracker()
        self.analyzer = analyzer or ComplexityAnalyzer()
        self.selector = selector or AgentSelector(registry)
        self.inactive_after = inactive_after

        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = defaultdict(int)

        self._total_messages = 0
        self._responder_usage: Dict[str, int] = defaultdict(int)
        self._average_response_time_ms = 0.0
        self._recent_outcomes: Deque[bool] = deque(maxlen=HEALTH_WINDOW)

        logger.info(f"✅ AgentOrchestrator initialized with {len(registry)} responders")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        llm_service: Optional[LLMService] = None,
        tools: Optional[ToolRegistry] = None,
        registry: Optional[CapabilityRegistry] = None,
    ) -> "AgentOrchestrator":
        """Wire every component from settings"""
        llm_service = llm_service or LLMService.from_settings(settings)
        tools = tools or build_default_tools(settings.tool_timeout_seconds)
        registry = registry or build_default_registry()

        store = JsonlSessionLog(settings.session_log_dir) if settings.session_log_dir else InMemorySessionLog()
        pipeline = DeepAgentPipeline(
            TaskDecomposer(),
            TaskExecutor(llm_service, model=settings.llm_model),
            Synthesizer(llm_service, model=settings.llm_model),
            history_size=settings.deep_session_history,
        )
        return cls(
            registry=registry,
            responders=build_responders(registry, llm_service, tools=tools, model=settings.llm_model),
            deep_pipeline=pipeline,
            history=HistoryManager(store, window=settings.history_window,
                                   summary_every=settings.summary_refresh_every),
            state_tracker=ConversationStateTracker(settings.detailed_style_threshold),
            analyzer=ComplexityAnalyzer(settings.deep_path_threshold),
            selector=AgentSelector(registry, settings.default_responder_id),
            inactive_after=timedelta(minutes=settings.inactive_after_minutes),
        )

    # ------------------------------------------------------------------
    # Turn processing
    # ------------------------------------------------------------------

    async def process_message(self, text: str, context: Optional[TurnContext] = None) -> AssistantMessage:
        """Handle one user message and return the assistant reply

        Never raises: provider, tool and internal failures all produce a
        valid reply with ``metadata.error`` set. The assistant message is
        logged and conversation state updated on every path.
        """
        context = context or TurnContext()
        start = time.monotonic()

        async with self._session_lock(context.session_id):
            session = self._get_or_create_session(context)
            state = self.state_tracker.get(context.session_id, context.user_id)
            logger.info(f"Processing message: session={context.session_id}, length={len(text)}")

            is_repeated = False
            try:
                await self.history.append(
                    context.session_id,
                    Message(role="user", content=text, metadata=dict(context.metadata)),
                )
                is_repeated = self.state_tracker.register_query(state, text)
                reply = await self._generate_reply(text, context, state, is_repeated)
            except Exception as e:
                logger.error(f"❌ Error processing message for {context.session_id}: {e}", exc_info=True)
                reply = AssistantMessage(
                    content=ERROR_REPLY,
                    agent_id=session.current_responder_id or self.selector.default_responder_id,
                    metadata={"error": str(e), "fallback": True},
                )
            reply.metadata["is_repeated_query"] = is_repeated

            await self._complete_turn(context, state, text, reply, start)

            elapsed_ms = (time.monotonic() - start) * 1000
            reply.metadata["processing_time_ms"] = round(elapsed_ms, 2)

            session.message_count += 1
            session.last_activity = datetime.now()
            session.current_responder_id = reply.agent_id
            self._record_stats(reply, elapsed_ms)

        logger.info(f"Turn completed in {elapsed_ms:.0f}ms by {reply.agent_id}")
        return reply

    @asynccontextmanager
    async def _session_lock(self, session_id: str):
        """Serialize turns per session; the lock is dropped once no turn holds or awaits it"""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        self._lock_users[session_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                del self._locks[session_id]

    async def _generate_reply(
        self,
        text: str,
        context: TurnContext,
        state: ConversationState,
        is_repeated: bool,
    ) -> AssistantMessage:
        analysis = self.analyzer.analyze(text)
        if self.analyzer.is_complex(analysis):
            logger.info(f"🧠 Deep path (complexity {analysis.score:.2f})")
            reply = await self._deep_reply(text, analysis)
        else:
            reply = await self._simple_reply(text, context, state, is_repeated)
        reply.metadata["complexity"] = analysis.score
        return reply

    async def _complete_turn(
        self,
        context: TurnContext,
        state: ConversationState,
        text: str,
        reply: AssistantMessage,
        start: float,
    ) -> None:
        try:
            history = await self.history.append(
                context.session_id,
                Message(
                    role="assistant",
                    content=reply.content,
                    agent_id=reply.agent_id,
                    metadata={
                        "processing_time_ms": round((time.monotonic() - start) * 1000, 2),
                        "tools_used": reply.metadata.get("tools_used", []),
                    },
                ),
            )
            logger.debug(f"Session {context.session_id} topics: {history.key_topics}")
        except Exception as e:
            logger.error(f"❌ Failed to log assistant message for {context.session_id}: {e}", exc_info=True)
            reply.metadata.setdefault("error", str(e))
        self.state_tracker.update(state, text, reply.content, reply.agent_id)

    async def _simple_reply(
        self,
        text: str,
        context: TurnContext,
        state: ConversationState,
        is_repeated: bool,
    ) -> AssistantMessage:
        selection = self.selector.select(text, state)
        responder = self.responders[selection.responder_id]
        history = await self.history.load(context.session_id)

        result = await responder.respond(
            text,
            ResponderContext(
                session_id=context.session_id,
                user_id=context.user_id,
                recent_messages=await self.history.recent(context.session_id),
                conversation_summary=history.conversation_summary,
                user_profile=dict(history.user_profile),
                key_topics=list(history.key_topics),
                conversation_stage=state.conversation_stage.value,
                preferred_response_style=state.preferred_response_style.value,
                is_repeated_query=is_repeated,
                metadata=dict(context.metadata),
            ),
        )

        metadata: Dict[str, Any] = {
            "confidence": result.confidence,
            "tools_used": result.tools_used,
            "deep_agent": False,
        }
        if result.fallback:
            metadata["fallback"] = True
        if result.error:
            metadata["error"] = result.error
        return AssistantMessage(content=result.content, agent_id=selection.responder_id, metadata=metadata)

    async def _deep_reply(self, text: str, analysis) -> AssistantMessage:
        outcome = await self.deep_pipeline.run(text, analysis)
        progress = outcome.session.get_progress()

        metadata: Dict[str, Any] = {
            "deep_agent": True,
            "deep_session_id": outcome.session.id,
            "tasks_completed": progress["completed"],
            "total_tasks": progress["total"],
            "tools_used": [],
        }
        if outcome.synthesis.fallback:
            metadata["fallback"] = True
        if outcome.synthesis.error:
            metadata["error"] = outcome.synthesis.error
        return AssistantMessage(content=outcome.content, agent_id=DEEP_AGENT_ID, metadata=metadata)

    # ------------------------------------------------------------------
    # Sessions and diagnostics
    # ------------------------------------------------------------------

    def _get_or_create_session(self, context: TurnContext) -> Session:
        session = self._sessions.get(context.session_id)
        if session is None:
            session = Session(session_id=context.session_id, user_id=context.user_id)
            self._sessions[context.session_id] = session
            logger.info(f"New session created: {context.session_id}")
        return session

    def _record_stats(self, reply: AssistantMessage, elapsed_ms: float) -> None:
        self._total_messages += 1
        self._responder_usage[reply.agent_id] += 1
        total = self._average_response_time_ms * (self._total_messages - 1)
        self._average_response_time_ms = (total + elapsed_ms) / self._total_messages
        self._recent_outcomes.append(reply.degraded)

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get_conversation_state(self, session_id: str) -> Optional[ConversationState]:
        if session_id not in self._sessions:
            return None
        return self.state_tracker.get(session_id)

    async def get_history(self, session_id: str, limit: Optional[int] = None) -> List[Message]:
        return await self.history.recent(session_id, limit)

    def get_stats(self) -> Dict[str, Any]:
        """Aggregate, in-memory diagnostics; reset on restart"""
        now = datetime.now()
        failures = sum(1 for degraded in self._recent_outcomes if degraded)
        degraded = bool(self._recent_outcomes) and failures / len(self._recent_outcomes) >= 0.5

        return {
            "total_sessions": len(self._sessions),
            "active_sessions": sum(1 for s in self._sessions.values() if s.is_active(self.inactive_after, now)),
            "total_messages": self._total_messages,
            "responder_usage": dict(self._responder_usage),
            "average_response_time_ms": round(self._average_response_time_ms, 2),
            "system_health": "degraded" if degraded else "healthy",
            "deep_sessions": self.deep_pipeline.get_session_stats(),
        }

    def get_responder_list(self) -> List[Dict[str, Any]]:
        return [descriptor.to_dict() for descriptor in self.registry.all()]
