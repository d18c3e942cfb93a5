"""
Text chat REST endpoints + per-session history.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from explorabot.middleware.limits import CHAT_RATE_LIMIT, limiter, require_json
from explorabot.models.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HistoryResponse,
    TurnResponse,
)
from explorabot.services.markdown_service import render_markdown
from explorabot.services.session_service import sessions

router = APIRouter(prefix="/api/chat", tags=["chat"])

_ERRORS = {code: {"model": ErrorResponse} for code in (400, 413, 415, 429)}


@router.post("", response_model=ChatResponse, responses=_ERRORS, dependencies=[Depends(require_json)])
@limiter.limit(CHAT_RATE_LIMIT)
async def chat(request: Request, req: ChatRequest):
    """
    Send a message, get the bot's reply.
    Omit session_id to start a new conversation.
    """
    session_id, responder = sessions.get_or_create(req.session_id)
    intent, reply = responder.respond(req.message)

    request_id = getattr(request.state, "request_id", None)
    logger.info(f"Chat [{session_id[:8]}] intent={intent}: '{req.message[:50]}' -> '{reply[:50]}'")

    return ChatResponse(
        response=reply,
        html=render_markdown(reply),
        intent=intent,
        session_id=session_id,
        requestId=request_id,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/{session_id}/history", response_model=HistoryResponse)
async def get_history(session_id: str):
    responder = sessions.get(session_id)
    if responder is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return HistoryResponse(
        session_id=session_id,
        last_intent=responder.last_intent,
        turns=[TurnResponse.model_validate(t) for t in responder.get_history()],
    )


@router.delete("/{session_id}/history")
async def clear_history(session_id: str):
    responder = sessions.get(session_id)
    if responder is None:
        raise HTTPException(status_code=404, detail="Session not found")
    responder.clear_context()
    return {"status": "cleared", "session_id": session_id}
