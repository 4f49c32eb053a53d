"""Responders that turn a selected descriptor into a reply."""

from concierge.responders.base import (
    Responder,
    ResponderContext,
    ResponderReply,
    build_responders,
    calculate_confidence,
)

__all__ = [
    "Responder",
    "ResponderContext",
    "ResponderReply",
    "build_responders",
    "calculate_confidence",
]
