"""Conversation State Tracker - per-session stage machine and repetition hints."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[?.!,]")
_GREETING = re.compile(r"\b(hello|hi)\b")

SPECIALIZED_STAGE_KEYWORDS = ("investment", "funding")
ACTION_STAGE_KEYWORDS = ("apply", "contact")


class ConversationStage(str, Enum):
    """Where the conversation currently is"""
    GREETING = "greeting"
    INFORMATION = "information"
    SPECIALIZED = "specialized"
    ACTION = "action"


class ResponseStyle(str, Enum):
    BRIEF = "brief"
    DETAILED = "detailed"


def normalize_message(message: str) -> str:
    """Lowercase, trim and strip ``?.!,`` for repetition detection"""
    return _PUNCTUATION.sub("", message.lower().strip())


@dataclass
class ConversationState:
    """Mutable per-session state, updated once per turn"""
    session_id: str
    user_id: str
    topics_covered: List[str] = field(default_factory=list)
    conversation_stage: ConversationStage = ConversationStage.GREETING
    preferred_response_style: ResponseStyle = ResponseStyle.BRIEF
    repeated_queries: Dict[str, int] = field(default_factory=dict)
    last_agent_used: Optional[str] = None
    last_greeting_at: Optional[datetime] = None
    last_topic_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "topics_covered": list(self.topics_covered),
            "conversation_stage": self.conversation_stage.value,
            "preferred_response_style": self.preferred_response_style.value,
            "repeated_queries": dict(self.repeated_queries),
            "last_agent_used": self.last_agent_used,
            "last_greeting_at": self.last_greeting_at.isoformat() if self.last_greeting_at else None,
            "last_topic_at": self.last_topic_at.isoformat() if self.last_topic_at else None,
        }


class ConversationStateTracker:
    """Owns every session's ConversationState

    Callers must hold the session's turn lock; the tracker itself does no
    locking.
    """

    def __init__(self, detailed_style_threshold: int = 300):
        self.detailed_style_threshold = detailed_style_threshold
        self._states: Dict[str, ConversationState] = {}

    def get(self, session_id: str, user_id: str = "anonymous") -> ConversationState:
        """Return the session's state, creating it on first use"""
        state = self._states.get(session_id)
        if state is None:
            state = ConversationState(session_id=session_id, user_id=user_id)
            self._states[session_id] = state
            logger.debug(f"New conversation state: {session_id}")
        return state

    def register_query(self, state: ConversationState, message: str) -> bool:
        """Count a message and report whether it was seen before"""
        key = normalize_message(message)
        previous = state.repeated_queries.get(key, 0)
        state.repeated_queries[key] = previous + 1
        if previous > 0:
            logger.info(f"🔁 Repeated query in {state.session_id} ({previous + 1}x)")
        return previous > 0

    def update(self, state: ConversationState, message: str, reply: str, responder_id: str) -> None:
        """Apply one completed turn to the state"""
        lower = message.lower()
        now = datetime.now()

        if "about" in lower:
            if "about" not in state.topics_covered:
                state.topics_covered.append("about")
            state.last_topic_at = now

        if _GREETING.search(lower):
            state.last_greeting_at = now

        if any(keyword in lower for keyword in SPECIALIZED_STAGE_KEYWORDS):
            state.conversation_stage = ConversationStage.SPECIALIZED
        elif any(keyword in lower for keyword in ACTION_STAGE_KEYWORDS):
            state.conversation_stage = ConversationStage.ACTION
        elif state.topics_covered:
            state.conversation_stage = ConversationStage.INFORMATION

        state.last_agent_used = responder_id

        if len(reply) > self.detailed_style_threshold:
            state.preferred_response_style = ResponseStyle.DETAILED

    def __len__(self) -> int:
        return len(self._states)
