"""Unit tests for HistoryManager and session log stores"""

import pytest

from concierge.core.history import (
    HistoryManager,
    InMemorySessionLog,
    JsonlSessionLog,
    Message,
    extract_profile,
    extract_topics,
)


class TestExtraction:

    def test_topics_use_word_boundaries(self):
        assert extract_topics("We said our startup needs funding") == ["funding", "startup"]
        assert "ai" not in extract_topics("I said it again")

    def test_topics_multiword(self):
        assert "business plan" in extract_topics("Can you review my Business Plan?")

    def test_company_from_profile(self):
        profile = extract_profile("My company is Acme Robotics")

        assert profile == {"company": "Acme Robotics"}

    def test_stage_hints(self):
        assert extract_profile("Looking for investment")["stage"] == "evaluation"
        assert extract_profile("We want to partner with you")["stage"] == "partnership"
        assert extract_profile("hello") == {}


class TestHistoryManager:
    """Append-only log with a bounded recent window"""

    @pytest.mark.asyncio
    async def test_window_caps_returned_context_only(self):
        store = InMemorySessionLog()
        manager = HistoryManager(store, window=3)

        for i in range(5):
            await manager.append("s1", Message(role="user", content=f"message {i}"))

        recent = await manager.recent("s1")
        assert [m.content for m in recent] == ["message 2", "message 3", "message 4"]
        assert len(await store.load("s1")) == 5

    @pytest.mark.asyncio
    async def test_cache_stays_bounded_while_store_keeps_everything(self):
        store = InMemorySessionLog()
        manager = HistoryManager(store, window=3, summary_every=5)

        for i in range(40):
            await manager.append("s1", Message(role="user", content=f"message {i}"))

        history = await manager.load("s1")
        assert len(history.messages) == manager.cache_size == 10
        assert history.messages[0].content == "message 30"
        assert history.total_messages == 40
        assert history.get_summary()["message_count"] == 40
        assert history.conversation_summary.splitlines()[-1] == "user: message 39"
        assert len(await store.load("s1")) == 40
        assert manager.get_stats()["cached_messages"] == 10

    @pytest.mark.asyncio
    async def test_summary_cadence_counts_restored_messages(self, tmp_path):
        first = HistoryManager(JsonlSessionLog(str(tmp_path)), summary_every=5)
        for i in range(4):
            await first.append("s1", Message(role="user", content=f"question {i}"))

        second = HistoryManager(JsonlSessionLog(str(tmp_path)), summary_every=5)
        history = await second.append("s1", Message(role="user", content="question 4"))

        assert history.total_messages == 5
        assert history.conversation_summary.startswith("user: question 0")

    @pytest.mark.asyncio
    async def test_limit_cannot_exceed_window(self):
        manager = HistoryManager(window=2)
        for i in range(4):
            await manager.append("s1", Message(role="user", content=str(i)))

        assert len(await manager.recent("s1", limit=10)) == 2
        assert [m.content for m in await manager.recent("s1", limit=1)] == ["3"]
        assert await manager.recent("s1", limit=0) == []

    @pytest.mark.asyncio
    async def test_key_topics_deduplicated_across_session(self):
        manager = HistoryManager()

        await manager.append("s1", Message(role="user", content="Tell me about fintech"))
        await manager.append("s1", Message(role="assistant", content="Blockchain is big in fintech"))
        history = await manager.append("s1", Message(role="user", content="More fintech and funding"))

        assert history.key_topics == ["fintech", "funding"]

    @pytest.mark.asyncio
    async def test_profile_accumulates(self):
        manager = HistoryManager()

        await manager.append("s1", Message(role="user", content="My company is Acme"))
        await manager.update_profile("s1", industry="robotics", ignored=None)
        history = await manager.load("s1")

        assert history.user_profile == {"company": "Acme", "industry": "robotics"}

    @pytest.mark.asyncio
    async def test_summary_refreshes_every_n_messages(self):
        manager = HistoryManager(summary_every=5)

        for i in range(4):
            await manager.append("s1", Message(role="user", content=f"question {i}"))
        assert (await manager.load("s1")).conversation_summary == ""

        history = await manager.append("s1", Message(role="assistant", content="y" * 150))
        assert history.conversation_summary.startswith("user: question 0")
        assert ("assistant: " + "y" * 100 + "...") in history.conversation_summary

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self):
        manager = HistoryManager()

        await manager.append("s1", Message(role="user", content="one"))
        await manager.append("s2", Message(role="user", content="two"))

        assert [m.content for m in await manager.recent("s1")] == ["one"]
        assert manager.get_stats() == {"cached_sessions": 2, "total_messages": 2, "cached_messages": 2}


class TestJsonlSessionLog:
    """File-backed log restores history across manager instances"""

    @pytest.mark.asyncio
    async def test_history_restored_from_disk(self, tmp_path):
        first = HistoryManager(JsonlSessionLog(str(tmp_path)))
        await first.append("s/1", Message(role="user", content="Our startup needs funding"))
        await first.append("s/1", Message(role="assistant", content="Happy to help", agent_id="investment"))

        second = HistoryManager(JsonlSessionLog(str(tmp_path)))
        history = await second.load("s/1")

        assert [m.content for m in history.messages] == ["Our startup needs funding", "Happy to help"]
        assert history.messages[1].agent_id == "investment"
        assert history.key_topics == ["funding", "startup"]
        assert list(tmp_path.iterdir())[0].name == "s_1.jsonl"

    @pytest.mark.asyncio
    async def test_corrupt_lines_skipped(self, tmp_path):
        store = JsonlSessionLog(str(tmp_path))
        await store.append("s1", Message(role="user", content="kept"))
        with open(tmp_path / "s1.jsonl", "a", encoding="utf-8") as f:
            f.write("{not json\n")

        messages = await store.load("s1")

        assert [m.content for m in messages] == ["kept"]

    @pytest.mark.asyncio
    async def test_missing_session_is_empty(self, tmp_path):
        assert await JsonlSessionLog(str(tmp_path)).load("nobody") == []
