"""LLM boundary: provider interface, adapters, and the fallback service."""

from concierge.llm.base import (
    BaseLLMProvider,
    LLMConfig,
    LLMProviderFactory,
    LLMResponse,
    TokenUsage,
    ToolCall,
)
from concierge.llm.service import LLMService

__all__ = [
    "BaseLLMProvider",
    "LLMConfig",
    "LLMProviderFactory",
    "LLMResponse",
    "TokenUsage",
    "ToolCall",
    "LLMService",
]
