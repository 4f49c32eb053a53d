"""LLM Provider Interface - Abstract Base for Model Adapters

This module defines the abstract interface for LLM providers so the
orchestration core can switch between OpenAI-compatible HTTP endpoints,
LangChain chat models, or anything else that can answer a chat request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from concierge.errors import ProviderError

logger = logging.getLogger(__name__)

FINISH_REASONS = ("stop", "length", "content_filter")


@dataclass
class LLMConfig:
    """Generation parameters for a single request"""
    temperature: float = 0.7
    max_tokens: int = 1000
    top_p: float = 0.95
    preferred_provider: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class ToolCall:
    """A structured tool invocation requested by the model"""
    tool_id: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    call_id: Optional[str] = None


@dataclass
class LLMResponse:
    """Standardized response from LLM"""
    content: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: str = "stop"
    processing_time_ms: float = 0.0
    tool_calls: List[ToolCall] = field(default_factory=list)
    provider: Optional[str] = None


def normalize_finish_reason(reason: Optional[str]) -> str:
    """Map provider-specific finish reasons onto stop/length/content_filter"""
    if reason in FINISH_REASONS:
        return reason
    if reason in ("max_tokens", "max_length"):
        return "length"
    if reason in ("safety", "filtered"):
        return "content_filter"
    return "stop"


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers

    All adapters inherit from this class and implement ``generate``.
    Any failure must surface as ``ProviderError``.
    """

    def __init__(
        self,
        endpoint: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider identifier (e.g., 'generic', 'langchain')"""
        pass

    @abstractmethod
    async def generate(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """Generate a response for a chat message list

        Args:
            messages: List of {"role", "content"} dicts
            config: Generation parameters
            model: Optional model override

        Returns:
            LLMResponse object

        Raises:
            ProviderError: If the provider could not answer
        """
        pass


class LLMProviderFactory:
    """Factory for creating LLM provider instances"""

    _providers: Dict[str, type] = {}

    @classmethod
    def register(cls, provider_type: str, provider_class: type):
        """Register a provider class for a provider type"""
        cls._providers[provider_type] = provider_class

    @classmethod
    def create(
        cls,
        provider_type: str,
        endpoint: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
    ) -> BaseLLMProvider:
        """Create a provider instance for the given type

        Falls back to the generic adapter when the type is unknown.

        Raises:
            ProviderError: If neither the type nor 'generic' is registered
        """
        if provider_type not in cls._providers:
            if "generic" in cls._providers:
                logger.warning(f"No adapter for '{provider_type}', using generic")
                provider_type = "generic"
            else:
                raise ProviderError(f"Unknown provider type: {provider_type}", provider_type)

        return cls._providers[provider_type](endpoint, model, api_key=api_key, timeout=timeout)

    @classmethod
    def get_available_types(cls) -> List[str]:
        """Get list of registered provider types"""
        return list(cls._providers.keys())
