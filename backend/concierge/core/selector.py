"""Agent Selector - deterministic scoring over the capability registry.

Given a message, the session's conversation state and the registry, returns
exactly one responder id. The function has no side effects beyond logging.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from concierge.core.conversation_state import ConversationState
from concierge.core.registry import CapabilityRegistry, ResponderDescriptor
from concierge.errors import ConciergeError

logger = logging.getLogger(__name__)

SPECIALTY_MATCH_BONUS = 10
CONTINUITY_BONUS = 15
EXPLICIT_MENTION_BONUS = 25
TRIGGER_WORD_BONUS = 20


@dataclass
class SelectionResult:
    """Chosen responder plus the scores that led to it"""
    responder_id: str
    score: int
    scores: Dict[str, int] = field(default_factory=dict)
    fallback: bool = False


def _specialty_matches(words: List[str], specialty: str) -> bool:
    specialty_lower = specialty.lower()
    tokens = specialty_lower.split()
    return any(
        word in tokens or (len(word) > 3 and word in specialty_lower)
        for word in words
    )


class AgentSelector:
    """Pick the best responder for a message"""

    def __init__(self, registry: CapabilityRegistry, default_responder_id: str = "primary"):
        self.registry = registry
        self.default_responder_id = default_responder_id

    def score(
        self,
        descriptor: ResponderDescriptor,
        message: str,
        state: Optional[ConversationState] = None,
    ) -> int:
        """Score a descriptor that can handle the message"""
        lower = message.lower()
        words = lower.split()

        score = descriptor.priority
        score += SPECIALTY_MATCH_BONUS * sum(
            1 for specialty in descriptor.specialties if _specialty_matches(words, specialty)
        )

        if state is not None and state.last_agent_used == descriptor.id:
            score += CONTINUITY_BONUS

        if descriptor.name.lower() in lower or any(s.lower() in lower for s in descriptor.specialties):
            score += EXPLICIT_MENTION_BONUS

        score += TRIGGER_WORD_BONUS * sum(
            1 for trigger in self.registry.trigger_words(descriptor.id) if trigger in lower
        )
        return score

    def select(self, message: str, state: Optional[ConversationState] = None) -> SelectionResult:
        """Return exactly one registered responder id

        Highest score wins; ties go to the earliest registered descriptor.
        With no capable candidate, the default id is used, or the first
        registered descriptor when the default is absent.
        """
        best: Optional[ResponderDescriptor] = None
        best_score = -1
        scores: Dict[str, int] = {}

        for descriptor in self.registry.all():
            if not descriptor.can_handle(message):
                continue
            value = self.score(descriptor, message, state)
            scores[descriptor.id] = value
            # Strict comparison keeps the earliest registered on ties
            if value > best_score:
                best, best_score = descriptor, value

        logger.debug(f"🔍 Selection scores for '{message[:50]}': {scores}")

        if best is not None:
            logger.info(f"✅ Selected responder: {best.id} (score {best_score})")
            return SelectionResult(responder_id=best.id, score=best_score, scores=scores)

        responders = self.registry.all()
        if not responders:
            raise ConciergeError("Capability registry is empty")

        if self.default_responder_id in self.registry:
            fallback_id = self.default_responder_id
        else:
            fallback_id = responders[0].id
        logger.warning(f"⚠️ No responder matched, using fallback: {fallback_id}")
        return SelectionResult(responder_id=fallback_id, score=0, scores=scores, fallback=True)
