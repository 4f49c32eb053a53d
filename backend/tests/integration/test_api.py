"""Integration tests for the HTTP API"""

import pytest
from fastapi.testclient import TestClient

from concierge.api import create_app
from concierge.config import Settings


@pytest.fixture
def client(orchestrator):
    app = create_app(settings=Settings(_env_file=None), orchestrator=orchestrator)
    return TestClient(app)


class TestChatEndpoint:

    def test_chat_issues_session(self, client):
        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "assistant"
        assert data["agent_id"] == "general-conversation"
        assert data["session_id"].startswith("session-")
        assert data["metadata"]["is_repeated_query"] is False

    def test_chat_continues_session(self, client):
        client.post("/api/chat", json={"message": "Hello", "session_id": "s1"})
        response = client.post("/api/chat", json={"message": "hello", "session_id": "s1"})

        assert response.json()["metadata"]["is_repeated_query"] is True

    def test_empty_message_rejected(self, client):
        response = client.post("/api/chat", json={"message": ""})

        assert response.status_code == 422


class TestReadEndpoints:

    def test_history(self, client):
        client.post("/api/chat", json={"message": "Hello", "session_id": "s1", "user_id": "u1"})

        response = client.get("/api/sessions/s1/history")

        assert response.status_code == 200
        data = response.json()
        assert data["message_count"] == 1
        assert [m["role"] for m in data["messages"]] == ["user", "assistant"]
        assert data["conversation_state"]["last_agent_used"] == "general-conversation"

    def test_history_unknown_session(self, client):
        assert client.get("/api/sessions/nope/history").status_code == 404

    def test_stats_and_health(self, client):
        client.post("/api/chat", json={"message": "Hello", "session_id": "s1"})

        stats = client.get("/api/stats").json()
        health = client.get("/api/health").json()

        assert stats["total_messages"] == 1
        assert stats["responder_usage"] == {"general-conversation": 1}
        assert health["status"] == "healthy"

    def test_responders(self, client):
        responders = client.get("/api/responders").json()

        assert [r["id"] for r in responders][:2] == ["primary", "general-conversation"]
        assert responders[3]["tools"] == ["funding-calculator", "funding-stages"]
