"""Pydantic models for API requests and responses."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Chat request model."""
    message: str = Field(..., min_length=1, description="User message")
    session_id: Optional[str] = Field(None, description="Session identifier; a new one is issued when omitted")
    user_id: str = Field(default="anonymous", description="User identifier")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque caller metadata")


class ChatResponse(BaseModel):
    """Assistant reply for one turn."""
    id: str = Field(..., description="Message identifier")
    role: str = Field(default="assistant", description="Always 'assistant'")
    content: str = Field(..., description="Reply text")
    agent_id: str = Field(..., description="Responder that produced the reply")
    session_id: str = Field(..., description="Session identifier")
    timestamp: datetime = Field(..., description="Reply time")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Confidence, timing, tools and error flags")


class HistoryMessage(BaseModel):
    id: str
    role: str
    content: str
    timestamp: datetime
    agent_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HistoryResponse(BaseModel):
    """Recent messages for a session."""
    session_id: str = Field(..., description="Session identifier")
    message_count: int = Field(..., description="Turns processed in this session")
    messages: List[HistoryMessage] = Field(..., description="Most recent messages, oldest first")
    conversation_state: Optional[Dict[str, Any]] = Field(None, description="Current conversation state")


class ResponderInfo(BaseModel):
    id: str
    name: str
    description: str
    specialties: List[str]
    priority: int
    tools: List[str] = Field(default_factory=list)


class StatsResponse(BaseModel):
    """Aggregate orchestrator diagnostics."""
    total_sessions: int
    active_sessions: int
    total_messages: int
    responder_usage: Dict[str, int]
    average_response_time_ms: float
    system_health: str
    deep_sessions: Dict[str, Any]
