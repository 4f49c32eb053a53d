"""Chat API Routes

FastAPI endpoints over the orchestrator held in ``app.state``.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, HTTPException, Request

from concierge import __version__
from concierge.api.models import (
    ChatRequest,
    ChatResponse,
    HistoryMessage,
    HistoryResponse,
    ResponderInfo,
    StatsResponse,
)
from concierge.core.orchestrator import AgentOrchestrator, TurnContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def get_orchestrator(request: Request) -> AgentOrchestrator:
    return request.app.state.orchestrator


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, request: Request):
    """Process one user message"""
    session_id = body.session_id or f"session-{uuid.uuid4().hex[:12]}"
    reply = await get_orchestrator(request).process_message(
        body.message,
        TurnContext(session_id=session_id, user_id=body.user_id, metadata=body.metadata),
    )
    return ChatResponse(
        id=reply.id,
        role=reply.role,
        content=reply.content,
        agent_id=reply.agent_id,
        session_id=session_id,
        timestamp=reply.timestamp,
        metadata=reply.metadata,
    )


@router.get("/stats", response_model=StatsResponse)
async def stats(request: Request):
    return StatsResponse(**get_orchestrator(request).get_stats())


@router.get("/responders", response_model=List[ResponderInfo])
async def responders(request: Request):
    return [ResponderInfo(**item) for item in get_orchestrator(request).get_responder_list()]


@router.get("/sessions/{session_id}/history", response_model=HistoryResponse)
async def session_history(session_id: str, request: Request, limit: int = 20):
    orchestrator = get_orchestrator(request)
    session = orchestrator.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")

    messages = await orchestrator.get_history(session_id, limit)
    state = orchestrator.get_conversation_state(session_id)
    return HistoryResponse(
        session_id=session_id,
        message_count=session.message_count,
        messages=[HistoryMessage(**m.to_dict()) for m in messages],
        conversation_state=state.to_dict() if state else None,
    )


@router.get("/health")
async def health(request: Request):
    stats = get_orchestrator(request).get_stats()
    return {"status": stats["system_health"], "version": __version__}
