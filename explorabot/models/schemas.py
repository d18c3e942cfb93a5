"""
Pydantic request / response schemas for the API.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from explorabot.config import settings


# ── Chat ─────────────────────────────────────────────────
class ChatRequest(BaseModel):
    message: str
    session_id: Optional[str] = Field(default=None, max_length=128)

    @field_validator("message")
    @classmethod
    def check_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message cannot be empty")
        if len(v) > settings.MAX_MESSAGE_LENGTH:
            raise ValueError(f"message too long (max {settings.MAX_MESSAGE_LENGTH} characters)")
        return v


class ChatResponse(BaseModel):
    response: str
    html: str
    intent: str
    session_id: str
    requestId: Optional[str] = None
    timestamp: datetime


# ── History ──────────────────────────────────────────────
class TurnResponse(BaseModel):
    role: str
    content: str
    intent: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True


class HistoryResponse(BaseModel):
    session_id: str
    last_intent: Optional[str] = None
    turns: List[TurnResponse] = []


# ── Errors ───────────────────────────────────────────────
class ErrorBody(BaseModel):
    message: str
    code: int
    timestamp: datetime
    details: Optional[Any] = None
    requestId: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorBody
