"""Responder - generate one reply for the selected descriptor.

A responder builds the prompt from its descriptor and the session context,
calls the LLM service, executes any tool calls it is allowed to make, and
scores the result. When generation fails it returns the descriptor's static
fallback reply with reduced confidence; it never raises.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from concierge.core.history import Message
from concierge.core.registry import CapabilityRegistry, ResponderDescriptor
from concierge.errors import ProviderError
from concierge.llm.base import LLMConfig, LLMResponse
from concierge.tools.base import ToolRegistry, ToolResult
from concierge.tools.markers import parse_tool_markers, replace_marker

logger = logging.getLogger(__name__)

REPLY_TEMPERATURE = 0.7
REPLY_MAX_TOKENS = 1000
REPLY_TOP_P = 0.9
# Prior messages included in the prompt (three exchanges)
PROMPT_HISTORY_MESSAGES = 6
FALLBACK_BASE_CONFIDENCE = 0.8
GENERIC_FALLBACK_REPLY = "I'm here to help. Could you tell me a bit more about what you need?"


@dataclass
class ResponderContext:
    """What a responder knows about the session when it replies"""
    session_id: str
    user_id: str
    recent_messages: List[Message] = field(default_factory=list)
    conversation_summary: str = ""
    user_profile: Dict[str, Any] = field(default_factory=dict)
    key_topics: List[str] = field(default_factory=list)
    conversation_stage: str = "greeting"
    preferred_response_style: str = "brief"
    is_repeated_query: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ResponderReply:
    content: str
    confidence: float
    tools_used: List[str] = field(default_factory=list)
    fallback: bool = False
    error: Optional[str] = None
    model: Optional[str] = None
    total_tokens: int = 0


def calculate_confidence(response: LLMResponse) -> float:
    """Heuristic confidence in [0.3, 1.0] from length, finish reason and latency"""
    confidence = 0.8

    if len(response.content) < 50:
        confidence -= 0.2
    elif len(response.content) > 500:
        confidence += 0.1

    if response.finish_reason == "length":
        confidence -= 0.1
    elif response.finish_reason == "content_filter":
        confidence -= 0.3

    if response.processing_time_ms > 10000:
        confidence -= 0.1

    return round(max(min(confidence, 1.0), 0.3), 4)


def format_tool_result(result: ToolResult) -> str:
    if not result.success:
        return f"*Tool execution failed: {result.error}*"
    if isinstance(result.data, (dict, list)):
        return "```json\n" + json.dumps(result.data, indent=2) + "\n```"
    return str(result.data)


class Responder:
    """LLM-backed responder for one descriptor"""

    def __init__(
        self,
        descriptor: ResponderDescriptor,
        llm_service,
        tools: Optional[ToolRegistry] = None,
        model: Optional[str] = None,
    ):
        self.descriptor = descriptor
        self.llm_service = llm_service
        self.tools = tools
        self.model = model

    @property
    def allowed_tools(self) -> List[str]:
        if self.tools is None:
            return []
        return [tool_id for tool_id in self.descriptor.tools if self.tools.get(tool_id) is not None]

    def build_system_prompt(self, context: ResponderContext) -> str:
        prompt = self.descriptor.system_prompt or f"You are the {self.descriptor.name}."

        if self.allowed_tools:
            described = "\n".join(
                f"- {tool_id}: {self.tools.get(tool_id).description}" for tool_id in self.allowed_tools
            )
            prompt += (
                f"\n\nAvailable Tools:\n{described}\n\n"
                "To use a tool, write [TOOL:tool-id:{json parameters}] in your reply."
            )

        if context.user_profile:
            prompt += f"\n\nUser Context: {json.dumps(context.user_profile)}"
        if context.conversation_summary:
            prompt += f"\n\nConversation Summary:\n{context.conversation_summary}"
        if context.is_repeated_query:
            prompt += "\n\nThe user has asked this before. Answer briefly and offer to go deeper."
        elif context.preferred_response_style == "brief":
            prompt += "\n\nKeep the answer concise."
        return prompt

    def build_messages(self, message: str, context: ResponderContext) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": self.build_system_prompt(context)}]

        history = list(context.recent_messages)
        if history and history[-1].role == "user" and history[-1].content == message:
            history = history[:-1]
        for item in history[-PROMPT_HISTORY_MESSAGES:]:
            if item.role in ("user", "assistant"):
                messages.append({"role": item.role, "content": item.content})

        messages.append({"role": "user", "content": message})
        return messages

    async def respond(self, message: str, context: ResponderContext) -> ResponderReply:
        """Generate a reply; degraded replies are flagged, never raised"""
        if not self.descriptor.llm_enabled:
            return self.fallback_reply(error=None)

        try:
            response = await self.llm_service.generate(
                self.model,
                self.build_messages(message, context),
                LLMConfig(
                    temperature=REPLY_TEMPERATURE,
                    max_tokens=REPLY_MAX_TOKENS,
                    top_p=REPLY_TOP_P,
                    preferred_provider=self.descriptor.preferred_provider,
                ),
            )
        except ProviderError as e:
            logger.warning(f"⚠️ LLM generation failed for {self.descriptor.id}, using fallback: {e}")
            return self.fallback_reply(error=str(e))

        content, tools_used = await self._apply_tools(response)
        return ResponderReply(
            content=content,
            confidence=calculate_confidence(response),
            tools_used=tools_used,
            model=response.model,
            total_tokens=response.usage.total_tokens,
        )

    def fallback_reply(self, error: Optional[str]) -> ResponderReply:
        return ResponderReply(
            content=self.descriptor.fallback_reply or GENERIC_FALLBACK_REPLY,
            confidence=max(FALLBACK_BASE_CONFIDENCE - 0.2, 0.5),
            fallback=True,
            error=error,
        )

    async def _apply_tools(self, response: LLMResponse):
        content = response.content
        tools_used: List[str] = []
        allowed = set(self.allowed_tools)
        if not allowed:
            return content, tools_used

        for call in response.tool_calls:
            if call.tool_id not in allowed:
                logger.warning(f"Ignoring tool call to '{call.tool_id}' from {self.descriptor.id}")
                continue
            result = await self.tools.execute(call.tool_id, call.arguments)
            content += f"\n\n**{call.tool_id} result:**\n{format_tool_result(result)}\n"
            tools_used.append(call.tool_id)

        for marker in parse_tool_markers(content):
            if marker.tool_id not in allowed:
                continue
            result = await self.tools.execute(marker.tool_id, marker.params)
            content = replace_marker(
                content, marker, f"\n\n**{marker.tool_id} result:**\n{format_tool_result(result)}\n"
            )
            tools_used.append(marker.tool_id)

        return content.strip() or response.content, tools_used


def build_responders(
    registry: CapabilityRegistry,
    llm_service,
    tools: Optional[ToolRegistry] = None,
    model: Optional[str] = None,
) -> Dict[str, Responder]:
    """One responder per registered descriptor"""
    return {
        descriptor.id: Responder(descriptor, llm_service, tools=tools, model=model)
        for descriptor in registry.all()
    }
