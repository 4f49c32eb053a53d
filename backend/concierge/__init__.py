"""Advisor Concierge - conversational agent orchestration core

Routes each incoming message to one specialized responder, tracks
per-session conversation state, and runs complex multi-part queries
through a dependency-ordered task pipeline before synthesizing a reply.
"""

__version__ = "1.0.0"
