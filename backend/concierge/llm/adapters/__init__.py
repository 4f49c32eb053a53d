"""LLM adapters; importing this package registers them with the factory."""

from concierge.llm.adapters.openai_compatible import (
    OpenAICompatibleAdapter,
    VLLMAdapter,
    OllamaAdapter,
    OpenAIAdapter,
)
from concierge.llm.adapters.langchain_adapter import LangChainChatAdapter

__all__ = [
    "OpenAICompatibleAdapter",
    "VLLMAdapter",
    "OllamaAdapter",
    "OpenAIAdapter",
    "LangChainChatAdapter",
]
