"""LangChain Adapter - routes generation through ``langchain_openai.ChatOpenAI``."""
import logging
import time
from typing import Dict, List, Optional

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

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


def to_langchain_messages(messages: List[Dict[str, str]]) -> List:
    """Convert role/content dicts into LangChain message objects"""
    converted = []
    for msg in messages:
        role = msg.get("role", "user")
        content = msg.get("content", "")

        if role == "system":
            converted.append(SystemMessage(content=content))
        elif role == "assistant":
            converted.append(AIMessage(content=content))
        else:
            converted.append(HumanMessage(content=content))

    return converted


class LangChainChatAdapter(BaseLLMProvider):
    """Provider backed by a LangChain chat model"""

    @property
    def provider_name(self) -> str:
        return "langchain"

    def _build_llm(self, config: LLMConfig, model: Optional[str]) -> ChatOpenAI:
        return ChatOpenAI(
            base_url=self.endpoint,
            model=model or self.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            top_p=config.top_p,
            api_key=self.api_key or "not-needed",
            timeout=self.timeout,
        )

    async def generate(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig,
        model: Optional[str] = None,
    ) -> LLMResponse:
        llm = self._build_llm(config, model)
        start = time.monotonic()

        try:
            response = await llm.ainvoke(to_langchain_messages(messages))
        except Exception as e:
            logger.error(f"LangChain generation failed: {e}")
            raise ProviderError(f"LangChain generation failed: {e}", self.provider_name) from e

        usage = TokenUsage()
        if getattr(response, "usage_metadata", None):
            usage = TokenUsage(
                prompt_tokens=response.usage_metadata.get("input_tokens", 0),
                completion_tokens=response.usage_metadata.get("output_tokens", 0),
            )

        metadata = getattr(response, "response_metadata", None) or {}
        tool_calls = [
            ToolCall(tool_id=call["name"], arguments=call.get("args") or {}, call_id=call.get("id"))
            for call in (getattr(response, "tool_calls", None) or [])
        ]

        content = response.content if isinstance(response.content, str) else str(response.content)
        return LLMResponse(
            content=content,
            model=metadata.get("model_name", model or self.model),
            usage=usage,
            finish_reason=normalize_finish_reason(metadata.get("finish_reason")),
            processing_time_ms=(time.monotonic() - start) * 1000,
            tool_calls=tool_calls,
            provider=self.provider_name,
        )


LLMProviderFactory.register("langchain", LangChainChatAdapter)
