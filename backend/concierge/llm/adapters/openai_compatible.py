"""OpenAI-compatible Adapter - For vLLM, Ollama, OpenAI and similar servers

Talks to any endpoint that implements ``POST {endpoint}/chat/completions``
and maps the reply, including structured tool calls, onto ``LLMResponse``.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from concierge.errors import ProviderError
from concierge.llm.base import (
    BaseLLMProvider,
    LLMConfig,
    LLMProviderFactory,
    LLMResponse,
    TokenUsage,
    ToolCall,
    normalize_finish_reason,
)

logger = logging.getLogger(__name__)


class OpenAICompatibleAdapter(BaseLLMProvider):
    """Adapter for OpenAI-compatible chat completion APIs"""

    def __init__(self, *args, transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "generic"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def generate(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """Generate a chat completion"""
        model_name = model or self.model
        payload = {"model": model_name, "messages": messages, **config.to_dict()}
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.endpoint}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.TimeoutException as e:
            logger.error("LLM request timed out")
            raise ProviderError(f"LLM request timed out: {e}", self.provider_name) from e
        except httpx.HTTPError as e:
            logger.error(f"LLM request failed: {e}")
            raise ProviderError(f"LLM request failed: {e}", self.provider_name) from e

        if response.status_code != 200:
            logger.error(f"LLM request failed: {response.status_code}")
            raise ProviderError(f"LLM request failed: HTTP {response.status_code}", self.provider_name)

        try:
            result = response.json()
            choice = result["choices"][0]
            message = choice.get("message") or {}
            usage = result.get("usage") or {}

            return LLMResponse(
                content=message.get("content") or "",
                model=result.get("model", model_name),
                usage=TokenUsage(
                    prompt_tokens=usage.get("prompt_tokens", 0),
                    completion_tokens=usage.get("completion_tokens", 0),
                ),
                finish_reason=normalize_finish_reason(choice.get("finish_reason")),
                processing_time_ms=(time.monotonic() - start) * 1000,
                tool_calls=self._parse_tool_calls(message.get("tool_calls") or []),
                provider=self.provider_name,
            )
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderError(f"Malformed LLM response: {e}", self.provider_name) from e

    def _parse_tool_calls(self, raw_calls: List[Dict[str, Any]]) -> List[ToolCall]:
        calls = []
        for raw in raw_calls:
            function = raw.get("function") or {}
            name = function.get("name")
            if not name:
                continue
            arguments = function.get("arguments") or {}
            if isinstance(arguments, str):
                try:
                    arguments = json.loads(arguments) if arguments.strip() else {}
                except json.JSONDecodeError:
                    logger.warning(f"Failed to parse arguments for tool call '{name}'")
                    arguments = {}
            if not isinstance(arguments, dict):
                logger.warning(f"Ignoring non-object arguments for tool call '{name}'")
                arguments = {}
            calls.append(ToolCall(tool_id=name, arguments=arguments, call_id=raw.get("id")))
        return calls


class VLLMAdapter(OpenAICompatibleAdapter):
    @property
    def provider_name(self) -> str:
        return "vllm"


class OllamaAdapter(OpenAICompatibleAdapter):
    @property
    def provider_name(self) -> str:
        return "ollama"


class OpenAIAdapter(OpenAICompatibleAdapter):
    @property
    def provider_name(self) -> str:
        return "openai"


# Register adapters with factory
LLMProviderFactory.register("generic", OpenAICompatibleAdapter)
LLMProviderFactory.register("vllm", VLLMAdapter)
LLMProviderFactory.register("ollama", OllamaAdapter)
LLMProviderFactory.register("openai", OpenAIAdapter)
