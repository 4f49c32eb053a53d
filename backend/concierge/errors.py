"""Exception hierarchy for the concierge core."""
from typing import Optional


class ConciergeError(Exception):
    """Base class for all concierge errors"""


class DuplicateResponderError(ConciergeError):
    """A responder id was registered twice"""

    def __init__(self, responder_id: str):
        super().__init__(f"Responder already registered: {responder_id}")
        self.responder_id = responder_id


class UnknownResponderError(ConciergeError):
    """A responder id is not present in the registry"""

    def __init__(self, responder_id: str):
        super().__init__(f"Unknown responder: {responder_id}")
        self.responder_id = responder_id


class ProviderError(ConciergeError):
    """The language model could not produce a response"""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class ToolExecutionError(ConciergeError):
    """A tool failed or timed out"""

    def __init__(self, tool_id: str, message: str):
        super().__init__(f"{tool_id}: {message}")
        self.tool_id = tool_id
