"""Unit tests for AgentOrchestrator turn processing"""

import asyncio

import httpx
import pytest

from concierge.config import Settings
from concierge.core.conversation_state import ConversationStage, ResponseStyle
from concierge.core.decomposer import SYNTHESIS_TASK_ID
from concierge.core.orchestrator import DEEP_AGENT_ID, ERROR_REPLY, AgentOrchestrator, TurnContext
from concierge.core.schemas import TaskType
from concierge.llm import LLMResponse, LLMService
from concierge.llm.adapters import OpenAICompatibleAdapter
from concierge.llm.base import BaseLLMProvider

DEEP_QUERY = (
    "Can you analyze the fintech market and compare it to AI, and then recommend "
    "a strategy for our seed investment round?"
)


class HangingProvider(BaseLLMProvider):
    """Never answers within the service timeout"""

    @property
    def provider_name(self) -> str:
        return "hanging"

    async def generate(self, messages, config, model=None):
        await asyncio.sleep(5)
        return LLMResponse(content="too late", model="m")


class TestSimplePath:
    """Single-responder turns"""

    @pytest.mark.asyncio
    async def test_greeting_on_fresh_session(self, orchestrator):
        reply = await orchestrator.process_message("Hello", TurnContext(session_id="s1", user_id="u1"))

        assert reply.role == "assistant"
        assert reply.agent_id == "general-conversation"
        assert reply.content == "This is a generated answer from the model."
        assert reply.metadata["deep_agent"] is False
        assert reply.metadata["is_repeated_query"] is False
        assert reply.metadata["confidence"] == 0.6
        assert reply.metadata["processing_time_ms"] >= 0

        state = orchestrator.get_conversation_state("s1")
        assert state.conversation_stage == ConversationStage.GREETING
        assert state.last_agent_used == "general-conversation"
        assert orchestrator.get_session("s1").message_count == 1

    @pytest.mark.asyncio
    async def test_repeated_message(self, orchestrator):
        context = TurnContext(session_id="s1")

        first = await orchestrator.process_message("What services do you offer?", context)
        second = await orchestrator.process_message("what services do you offer", context)

        assert first.metadata["is_repeated_query"] is False
        assert second.metadata["is_repeated_query"] is True
        assert second.agent_id == first.agent_id
        assert orchestrator.get_session("s1").message_count == 2
        state = orchestrator.get_conversation_state("s1")
        assert state.repeated_queries["what services do you offer"] == 2

    @pytest.mark.asyncio
    async def test_history_records_both_sides(self, orchestrator):
        await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        history = await orchestrator.get_history("s1")

        assert [m.role for m in history] == ["user", "assistant"]
        assert history[1].agent_id == "general-conversation"

    @pytest.mark.asyncio
    async def test_funding_question_reaches_specialized_stage(self, orchestrator):
        await orchestrator.process_message("I am looking for funding for my startup", TurnContext(session_id="s1"))

        assert orchestrator.get_conversation_state("s1").conversation_stage == ConversationStage.SPECIALIZED

    @pytest.mark.asyncio
    async def test_long_reply_switches_style(self, make_llm, orchestrator_for):
        orchestrator = orchestrator_for(make_llm(reply=lambda messages: "word " * 100))

        await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        state = orchestrator.get_conversation_state("s1")
        assert state.preferred_response_style == ResponseStyle.DETAILED

    @pytest.mark.asyncio
    async def test_provider_failure_returns_fallback(self, failing_orchestrator, registry):
        reply = await failing_orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        assert reply.content == registry.get("general-conversation").fallback_reply
        assert reply.metadata["fallback"] is True
        assert "All LLM providers failed" in reply.metadata["error"]
        assert failing_orchestrator.get_conversation_state("s1").last_agent_used == "general-conversation"
        assert len(await failing_orchestrator.get_history("s1")) == 2

    @pytest.mark.asyncio
    async def test_llm_timeout_does_not_hang(self, orchestrator_for):
        service = LLMService([HangingProvider("http://x", "m")], default_model="m", timeout_seconds=0.01)
        orchestrator = orchestrator_for(service)

        reply = await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        assert reply.metadata["fallback"] is True
        assert "hanging: timed out" in reply.metadata["error"]
        assert orchestrator.get_conversation_state("s1").last_agent_used == reply.agent_id


class TestDeepPath:
    """Complex queries through decomposition and synthesis"""

    @pytest.mark.asyncio
    async def test_complex_query_uses_deep_pipeline(self, orchestrator):
        reply = await orchestrator.process_message(DEEP_QUERY, TurnContext(session_id="s1"))

        assert reply.agent_id == DEEP_AGENT_ID
        assert reply.metadata["deep_agent"] is True
        assert reply.metadata["complexity"] >= 0.7
        assert reply.metadata["tasks_completed"] == reply.metadata["total_tasks"] == 3

        session = orchestrator.deep_pipeline.get_session(reply.metadata["deep_session_id"])
        final = session.tasks[-1]
        assert final.id == SYNTHESIS_TASK_ID
        assert final.type == TaskType.SYNTHESIS
        assert final.dependencies == [t.id for t in session.tasks[:-1]]
        assert orchestrator.get_conversation_state("s1").last_agent_used == DEEP_AGENT_ID

    @pytest.mark.asyncio
    async def test_total_llm_outage_still_answers(self, failing_orchestrator):
        reply = await failing_orchestrator.process_message(DEEP_QUERY, TurnContext(session_id="s1"))

        assert reply.content.strip()
        assert "Task failed" in reply.content
        assert reply.metadata["fallback"] is True
        assert reply.metadata["tasks_completed"] == 0
        assert failing_orchestrator.get_session("s1").message_count == 1


class TestRobustness:
    """Errors, ordering and isolation"""

    @pytest.mark.asyncio
    async def test_internal_error_becomes_reply(self, orchestrator, monkeypatch):
        def explode(query):
            raise RuntimeError("analyzer broke")

        monkeypatch.setattr(orchestrator.analyzer, "analyze", explode)

        reply = await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        assert reply.content == ERROR_REPLY
        assert reply.metadata["error"] == "analyzer broke"
        assert reply.metadata["is_repeated_query"] is False
        assert orchestrator.get_session("s1").message_count == 1
        assert orchestrator.get_stats()["system_health"] == "degraded"

    @pytest.mark.asyncio
    async def test_internal_error_still_logs_reply_and_updates_state(self, orchestrator, monkeypatch):
        def explode(query):
            raise RuntimeError("analyzer broke")

        monkeypatch.setattr(orchestrator.analyzer, "analyze", explode)

        reply = await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        history = await orchestrator.get_history("s1")
        assert [m.role for m in history] == ["user", "assistant"]
        assert history[1].content == ERROR_REPLY
        assert history[1].agent_id == reply.agent_id == "primary"

        state = orchestrator.get_conversation_state("s1")
        assert state.last_agent_used == "primary"
        assert state.last_greeting_at is not None

    @pytest.mark.asyncio
    async def test_internal_error_keeps_repetition_count(self, orchestrator, monkeypatch):
        context = TurnContext(session_id="s1")
        await orchestrator.process_message("Hello", context)

        def explode(query):
            raise RuntimeError("analyzer broke")

        monkeypatch.setattr(orchestrator.analyzer, "analyze", explode)
        reply = await orchestrator.process_message("hello!", context)

        assert reply.content == ERROR_REPLY
        assert reply.metadata["is_repeated_query"] is True

    @pytest.mark.asyncio
    async def test_malformed_provider_reply_uses_responder_fallback(self, orchestrator_for, registry):
        broken = OpenAICompatibleAdapter(
            "http://llm.local/v1", "m",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])),
        )
        orchestrator = orchestrator_for(LLMService([broken], default_model="m"))

        reply = await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        assert reply.agent_id == "general-conversation"
        assert reply.content == registry.get("general-conversation").fallback_reply
        assert reply.metadata["fallback"] is True
        assert "Malformed LLM response" in reply.metadata["error"]
        assert orchestrator.get_conversation_state("s1").last_agent_used == "general-conversation"
        assert [m.role for m in await orchestrator.get_history("s1")] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_malformed_provider_skipped_for_next_provider(self, orchestrator_for):
        def completion(request):
            return httpx.Response(200, json={
                "choices": [{"message": {"role": "assistant", "content": "Welcome aboard."},
                             "finish_reason": "stop"}],
            })

        providers = [
            OpenAICompatibleAdapter("http://a/v1", "m", transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json=[]))),
            OpenAICompatibleAdapter("http://b/v1", "m", transport=httpx.MockTransport(completion)),
        ]
        orchestrator = orchestrator_for(LLMService(providers, default_model="m"))

        reply = await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        assert reply.content == "Welcome aboard."
        assert "fallback" not in reply.metadata

    @pytest.mark.asyncio
    async def test_same_session_turns_keep_arrival_order(self, make_llm, orchestrator_for):
        orchestrator = orchestrator_for(make_llm())
        context = TurnContext(session_id="s1")

        await asyncio.gather(*[
            orchestrator.process_message(f"message {i}", context) for i in range(3)
        ])

        history = await orchestrator.get_history("s1")
        assert [m.content for m in history if m.role == "user"] == ["message 0", "message 1", "message 2"]
        assert [m.role for m in history] == ["user", "assistant"] * 3
        assert orchestrator.get_session("s1").message_count == 3
        assert orchestrator._locks == {}

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, orchestrator):
        replies = await asyncio.gather(
            orchestrator.process_message("Hello", TurnContext(session_id="a")),
            orchestrator.process_message("Hello", TurnContext(session_id="b")),
        )

        assert all(r.metadata["is_repeated_query"] is False for r in replies)
        assert len(await orchestrator.get_history("a")) == 2
        assert len(await orchestrator.get_history("b")) == 2

    def test_unknown_session(self, orchestrator):
        assert orchestrator.get_session("nope") is None
        assert orchestrator.get_conversation_state("nope") is None


class TestDiagnostics:

    @pytest.mark.asyncio
    async def test_stats(self, orchestrator):
        await orchestrator.process_message("Hello", TurnContext(session_id="a"))
        await orchestrator.process_message("Hello", TurnContext(session_id="b"))
        await orchestrator.process_message(DEEP_QUERY, TurnContext(session_id="b"))

        stats = orchestrator.get_stats()

        assert stats["total_sessions"] == 2
        assert stats["active_sessions"] == 2
        assert stats["total_messages"] == 3
        assert stats["responder_usage"] == {"general-conversation": 2, DEEP_AGENT_ID: 1}
        assert stats["average_response_time_ms"] >= 0
        assert stats["system_health"] == "healthy"
        assert stats["deep_sessions"]["total"] == 1

    def test_responder_list(self, orchestrator):
        responders = orchestrator.get_responder_list()

        assert responders[0]["id"] == "primary"
        assert len(responders) == 11


class TestFromSettings:

    @pytest.mark.asyncio
    async def test_wires_jsonl_history(self, tmp_path, fake_llm):
        settings = Settings(_env_file=None, session_log_dir=str(tmp_path), history_window=1)
        orchestrator = AgentOrchestrator.from_settings(settings, llm_service=fake_llm)

        await orchestrator.process_message("Hello", TurnContext(session_id="s1"))

        assert (tmp_path / "s1.jsonl").exists()
        assert len(await orchestrator.get_history("s1")) == 1

    def test_default_settings_build(self):
        orchestrator = AgentOrchestrator.from_settings(Settings(_env_file=None))

        assert isinstance(orchestrator.responders["primary"].llm_service, LLMService)
        assert orchestrator.selector.default_responder_id == "primary"
