"""Orchestration core: registry, selection, state, history and the deep pipeline.

The turn-level entry point lives in ``concierge.core.orchestrator``.
"""

from concierge.core.registry import CapabilityRegistry, KeywordRule, ResponderDescriptor
from concierge.core.catalog import DEFAULT_RESPONDERS, TRIGGER_WORDS, build_default_registry
from concierge.core.selector import AgentSelector, SelectionResult
from concierge.core.conversation_state import (
    ConversationStage,
    ConversationState,
    ConversationStateTracker,
    ResponseStyle,
    normalize_message,
)
from concierge.core.history import HistoryManager, InMemorySessionLog, JsonlSessionLog, Message
from concierge.core.complexity import ComplexityAnalysis, ComplexityAnalyzer
from concierge.core.schemas import DeepAgentSession, DeepTask, SessionStatus, TaskStatus, TaskType
from concierge.core.decomposer import TaskDecomposer
from concierge.core.executor import TaskExecutor
from concierge.core.synthesizer import Synthesizer
from concierge.core.deep_agent import DeepAgentPipeline

__all__ = [
    "CapabilityRegistry",
    "KeywordRule",
    "ResponderDescriptor",
    "DEFAULT_RESPONDERS",
    "TRIGGER_WORDS",
    "build_default_registry",
    "AgentSelector",
    "SelectionResult",
    "ConversationStage",
    "ConversationState",
    "ConversationStateTracker",
    "ResponseStyle",
    "normalize_message",
    "HistoryManager",
    "InMemorySessionLog",
    "JsonlSessionLog",
    "Message",
    "ComplexityAnalysis",
    "ComplexityAnalyzer",
    "DeepAgentSession",
    "DeepTask",
    "SessionStatus",
    "TaskStatus",
    "TaskType",
    "TaskDecomposer",
    "TaskExecutor",
    "Synthesizer",
    "DeepAgentPipeline",
]
