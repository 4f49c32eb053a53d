"""LLM Service - the single boundary the core uses to reach a language model.

Tries the preferred provider first and then every other configured provider
in order. Each attempt runs under ``asyncio.wait_for``; a timeout counts as a
provider failure. When every provider fails a ``ProviderError`` is raised.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from concierge.config import Settings
from concierge.errors import ProviderError
from concierge.llm.base import BaseLLMProvider, LLMConfig, LLMProviderFactory, LLMResponse

# Registers adapters with the factory
import concierge.llm.adapters  # noqa: F401

logger = logging.getLogger(__name__)


class LLMService:
    """Ordered set of providers with timeout and cross-provider fallback"""

    def __init__(
        self,
        providers: List[BaseLLMProvider],
        default_model: str,
        timeout_seconds: float = 60.0,
    ):
        self.providers: Dict[str, BaseLLMProvider] = {}
        for provider in providers:
            self.providers[provider.provider_name] = provider
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMService":
        """Build the provider chain described by settings"""
        names = [settings.model_type] + [
            name for name in settings.fallback_provider_list if name != settings.model_type
        ]
        providers = [
            LLMProviderFactory.create(
                name,
                endpoint=settings.llm_endpoint,
                model=settings.llm_model,
                api_key=settings.llm_api_key,
                timeout=settings.llm_timeout_seconds,
            )
            for name in names
        ]
        logger.info(f"✅ LLMService initialized with providers: {[p.provider_name for p in providers]}")
        return cls(providers, settings.llm_model, settings.llm_timeout_seconds)

    def _ordered(self, preferred: Optional[str]) -> List[BaseLLMProvider]:
        ordered = list(self.providers.values())
        if preferred and preferred in self.providers:
            ordered.remove(self.providers[preferred])
            ordered.insert(0, self.providers[preferred])
        return ordered

    async def generate(
        self,
        model: Optional[str],
        messages: List[Dict[str, str]],
        params: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        """Generate a response, falling back across providers

        Args:
            model: Model id, or None for the configured default
            messages: List of {"role", "content"} dicts
            params: Generation parameters including the provider hint

        Returns:
            LLMResponse from the first provider that answered

        Raises:
            ProviderError: If no provider produced a response
        """
        params = params or LLMConfig()
        errors = []

        for provider in self._ordered(params.preferred_provider):
            try:
                return await asyncio.wait_for(
                    provider.generate(messages, params, model=model or self.default_model),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning(f"⚠️ Provider '{provider.provider_name}' timed out after {self.timeout_seconds}s")
                errors.append(f"{provider.provider_name}: timed out")
            except ProviderError as e:
                logger.warning(f"⚠️ Provider '{provider.provider_name}' failed: {e}")
                errors.append(f"{provider.provider_name}: {e}")
            except Exception as e:
                logger.error(f"❌ Provider '{provider.provider_name}' raised {type(e).__name__}: {e}")
                errors.append(f"{provider.provider_name}: {type(e).__name__}: {e}")

        if not errors:
            raise ProviderError("No LLM providers configured")
        raise ProviderError("All LLM providers failed - " + "; ".join(errors))
