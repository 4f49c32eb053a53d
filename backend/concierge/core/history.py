"""History Manager - append-only message log and derived session context.

This module keeps each session's ordered message log, a bounded in-memory
tail of it for responders, and the summary derived from the whole log (key
topics, accumulated user profile, rolling conversation digest). Only the
store holds the full log. Persistence is delegated to a ``SessionLogStore``;
the in-memory store is the default and ``JsonlSessionLog`` writes one JSON
line per message with aiofiles.
"""
import json
import logging
import re
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

# Recent messages handed to responders
DEFAULT_HISTORY_WINDOW = 20
# Messages between summary refreshes
SUMMARY_REFRESH_EVERY = 5
# Messages included in the rolling digest
SUMMARY_SOURCE_MESSAGES = 10

TOPIC_KEYWORDS = [
    "ai", "artificial intelligence", "machine learning", "blockchain",
    "funding", "investment", "venture capital", "startup", "fintech",
    "saas", "software", "technology", "innovation", "market analysis",
    "business plan", "strategy", "growth", "scaling", "partnership",
]

_TOPIC_PATTERNS = {kw: re.compile(r"\b" + re.escape(kw) + r"\b") for kw in TOPIC_KEYWORDS}

COMPANY_PATTERNS = [
    re.compile(r"(?:my company is|my company|we are|our company is|i work at|i'm from) ([a-zA-Z0-9 ]+)", re.I),
    re.compile(r"(?:company called|startup called|business called) ([a-zA-Z0-9 ]+)", re.I),
]


@dataclass
class Message:
    """One entry in a session log"""
    role: str
    content: str
    id: str = field(default_factory=lambda: f"msg-{uuid.uuid4().hex[:12]}")
    timestamp: datetime = field(default_factory=datetime.now)
    agent_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "agent_id": self.agent_id,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data["id"],
            role=data["role"],
            content=data.get("content", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            agent_id=data.get("agent_id"),
            metadata=data.get("metadata") or {},
        )


class SessionLogStore(ABC):
    """Append-only message log keyed by session id"""

    @abstractmethod
    async def append(self, session_id: str, message: Message) -> None:
        pass

    @abstractmethod
    async def load(self, session_id: str) -> List[Message]:
        pass


class InMemorySessionLog(SessionLogStore):
    def __init__(self):
        self._logs: Dict[str, List[Message]] = defaultdict(list)

    async def append(self, session_id: str, message: Message) -> None:
        self._logs[session_id].append(message)

    async def load(self, session_id: str) -> List[Message]:
        return list(self._logs.get(session_id, []))


class JsonlSessionLog(SessionLogStore):
    """One ``<session_id>.jsonl`` file per session"""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", session_id)
        return self.directory / f"{safe_id}.jsonl"

    async def append(self, session_id: str, message: Message) -> None:
        async with aiofiles.open(self._path(session_id), mode="a", encoding="utf-8") as f:
            await f.write(json.dumps(message.to_dict(), ensure_ascii=False) + "\n")

    async def load(self, session_id: str) -> List[Message]:
        path = self._path(session_id)
        if not await aiofiles.os.path.exists(path):
            return []

        messages = []
        async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
            async for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    messages.append(Message.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning(f"Skipping corrupt log line in {path.name}: {e}")
        return messages


@dataclass
class SessionHistory:
    """Cached tail of one session's log plus derived context"""
    session_id: str
    messages: Deque[Message] = field(default_factory=deque)
    total_messages: int = 0
    key_topics: List[str] = field(default_factory=list)
    user_profile: Dict[str, Any] = field(default_factory=dict)
    conversation_summary: str = ""

    def get_summary(self) -> Dict[str, Any]:
        return {
            "key_topics": list(self.key_topics),
            "user_profile": dict(self.user_profile),
            "conversation_summary": self.conversation_summary,
            "message_count": self.total_messages,
        }


def extract_topics(content: str) -> List[str]:
    lower = content.lower()
    return [kw for kw, pattern in _TOPIC_PATTERNS.items() if pattern.search(lower)]


def extract_profile(content: str) -> Dict[str, str]:
    """Company name and stage hints from a user message"""
    profile = {}
    for pattern in COMPANY_PATTERNS:
        match = pattern.search(content)
        if match:
            company = match.group(1).strip()
            if company:
                profile["company"] = company
            break

    lower = content.lower()
    if "funding" in lower or "investment" in lower:
        profile["stage"] = "evaluation"
    elif "partner" in lower or "apply" in lower:
        profile["stage"] = "partnership"
    return profile


class HistoryManager:
    """Per-session message logs with a bounded context window

    The window bounds what ``recent`` returns. Each cached session keeps
    only the newest messages needed for the window and the digest; the
    stored log only grows.
    """

    def __init__(
        self,
        store: Optional[SessionLogStore] = None,
        window: int = DEFAULT_HISTORY_WINDOW,
        summary_every: int = SUMMARY_REFRESH_EVERY,
    ):
        self.store = store or InMemorySessionLog()
        self.window = window
        self.summary_every = summary_every
        self.cache_size = max(window, SUMMARY_SOURCE_MESSAGES)
        self._cache: Dict[str, SessionHistory] = {}
        logger.info(f"HistoryManager initialized (store={type(self.store).__name__}, window={window})")

    async def load(self, session_id: str) -> SessionHistory:
        """Return the cached history, rebuilding it from the store if needed"""
        if session_id in self._cache:
            return self._cache[session_id]

        history = SessionHistory(session_id=session_id, messages=deque(maxlen=self.cache_size))
        for message in await self.store.load(session_id):
            self._apply(history, message)
        self._cache[session_id] = history
        if history.total_messages:
            logger.info(f"History restored from store: {session_id} ({history.total_messages} messages)")
        return history

    async def append(self, session_id: str, message: Message) -> SessionHistory:
        """Persist a message and update derived context"""
        history = await self.load(session_id)
        await self.store.append(session_id, message)
        self._apply(history, message)
        return history

    def _apply(self, history: SessionHistory, message: Message) -> None:
        history.messages.append(message)
        history.total_messages += 1

        if message.role == "user":
            for topic in extract_topics(message.content):
                if topic not in history.key_topics:
                    history.key_topics.append(topic)
            history.user_profile.update(extract_profile(message.content))

        if history.total_messages % self.summary_every == 0:
            history.conversation_summary = self._build_summary(history.messages)

    def _build_summary(self, messages: Deque[Message]) -> str:
        lines = []
        for msg in list(messages)[-SUMMARY_SOURCE_MESSAGES:]:
            if msg.role == "system":
                continue
            content = msg.content[:100]
            if len(msg.content) > 100:
                content += "..."
            lines.append(f"{msg.role}: {content}")
        return "\n".join(lines)

    async def recent(self, session_id: str, limit: Optional[int] = None) -> List[Message]:
        """Most recent messages, capped at the window size"""
        history = await self.load(session_id)
        cap = self.window if limit is None else min(limit, self.window)
        if cap <= 0:
            return []
        return list(history.messages)[-cap:]

    async def update_profile(self, session_id: str, **values: Any) -> None:
        history = await self.load(session_id)
        history.user_profile.update({k: v for k, v in values.items() if v is not None})

    def get_stats(self) -> Dict[str, Any]:
        return {
            "cached_sessions": len(self._cache),
            "total_messages": sum(h.total_messages for h in self._cache.values()),
            "cached_messages": sum(len(h.messages) for h in self._cache.values()),
        }
