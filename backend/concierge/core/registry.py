"""Capability Registry - Catalog of Available Responders

This module holds the immutable descriptors of every responder the
selector may route to, in registration order, together with the
declarative trigger-word table used for scoring.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from concierge.errors import ConciergeError, DuplicateResponderError, UnknownResponderError

logger = logging.getLogger(__name__)


def is_short_message(message: str) -> bool:
    """Under 100 characters and at most 10 words"""
    return len(message) < 100 and len(message.split(" ")) <= 10


@dataclass(frozen=True)
class KeywordRule:
    """Declarative ``can_handle`` predicate

    A message is accepted when one of ``include`` occurs in it (or it is a
    short message and ``accept_short`` is set) and none of ``exclude``
    occurs. Independently, when ``fallback_unless`` is non-empty, any
    message containing none of those phrases is accepted as well.
    ``min_length``, ``excluded_prefixes`` and ``excluded_exact`` reject a
    message before anything else is checked.
    """
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    fallback_unless: Tuple[str, ...] = ()
    accept_short: bool = False
    min_length: int = 0
    excluded_prefixes: Tuple[str, ...] = ()
    excluded_exact: Tuple[str, ...] = ()

    def __call__(self, message: str) -> bool:
        text = message.lower().strip()

        if len(message) < self.min_length:
            return False
        if text in self.excluded_exact:
            return False
        if any(text.startswith(prefix) for prefix in self.excluded_prefixes):
            return False

        hit = any(phrase in text for phrase in self.include)
        if not hit and self.accept_short:
            hit = is_short_message(message)
        if hit and not any(phrase in text for phrase in self.exclude):
            return True

        if self.fallback_unless:
            return not any(phrase in text for phrase in self.fallback_unless)
        return False


@dataclass(frozen=True)
class ResponderDescriptor:
    """Information about an available responder"""

    id: str
    name: str
    description: str
    specialties: Tuple[str, ...]
    priority: int
    matcher: Callable[[str], bool] = field(compare=False, repr=False)
    tools: Tuple[str, ...] = ()
    system_prompt: str = ""
    fallback_reply: str = ""
    llm_enabled: bool = True
    preferred_provider: Optional[str] = None

    def can_handle(self, message: str) -> bool:
        return bool(self.matcher(message))

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "specialties": list(self.specialties),
            "priority": self.priority,
            "tools": list(self.tools),
        }


class CapabilityRegistry:
    """Registry of all responders and their capabilities

    Descriptors are kept in registration order; the selector relies on
    that order to break score ties. Once sealed, the registry rejects
    further registrations and can be shared without locking.
    """

    def __init__(self, trigger_words: Optional[Mapping[str, Sequence[str]]] = None):
        self._responders: Dict[str, ResponderDescriptor] = {}
        self._trigger_words: Dict[str, Tuple[str, ...]] = {
            responder_id: tuple(word.lower() for word in words)
            for responder_id, words in (trigger_words or {}).items()
        }
        self._sealed = False

    def register(self, descriptor: ResponderDescriptor) -> None:
        """Add a descriptor

        Raises:
            DuplicateResponderError: If the id is already registered
            ConciergeError: If the registry has been sealed
        """
        if self._sealed:
            raise ConciergeError("Registry is sealed; register responders at startup")
        if descriptor.id in self._responders:
            raise DuplicateResponderError(descriptor.id)

        self._responders[descriptor.id] = descriptor
        logger.debug(f"Registered responder: {descriptor.id} (priority {descriptor.priority})")

    def register_all(self, descriptors: Iterable[ResponderDescriptor]) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    def seal(self) -> None:
        self._sealed = True
        logger.info(f"📚 Capability Registry sealed with {len(self._responders)} responders")

    def get(self, responder_id: str) -> ResponderDescriptor:
        """Look up a descriptor

        Raises:
            UnknownResponderError: If the id is not registered
        """
        try:
            return self._responders[responder_id]
        except KeyError:
            raise UnknownResponderError(responder_id) from None

    def all(self) -> List[ResponderDescriptor]:
        """All descriptors in registration order"""
        return list(self._responders.values())

    def trigger_words(self, responder_id: str) -> Tuple[str, ...]:
        return self._trigger_words.get(responder_id, ())

    def __contains__(self, responder_id: str) -> bool:
        return responder_id in self._responders

    def __len__(self) -> int:
        return len(self._responders)

    def get_statistics(self) -> Dict:
        """Get registry statistics"""
        return {
            "total_responders": len(self._responders),
            "responders": [d.id for d in self._responders.values()],
            "with_tools": [d.id for d in self._responders.values() if d.tools],
            "with_trigger_words": sorted(self._trigger_words),
            "sealed": self._sealed,
        }
