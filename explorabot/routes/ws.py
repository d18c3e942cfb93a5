"""
Real-time chat WebSocket endpoint.

Each connection owns its own IntentResponder, so history never interleaves
across clients.
"""

import json
import secrets
import time
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from explorabot.config import settings
from explorabot.services.markdown_service import render_markdown
from explorabot.services.metrics_service import metrics
from explorabot.services.session_service import build_responder

router = APIRouter(tags=["websocket"])

SHUTDOWN_NOTICE = "Server is shutting down. Please reconnect shortly."


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class ConnectionManager:
    def __init__(self):
        self.active: Dict[str, WebSocket] = {}

    def connect(self, client_id: str, websocket: WebSocket) -> int:
        self.active[client_id] = websocket
        return metrics.ws_opened()

    def disconnect(self, client_id: str) -> int:
        if self.active.pop(client_id, None) is None:
            return metrics.ws_connections
        return metrics.ws_closed()

    async def close_all(self, notice: str = SHUTDOWN_NOTICE) -> None:
        for client_id, websocket in list(self.active.items()):
            try:
                await websocket.send_json({"type": "system", "content": notice})
                await websocket.close(code=1001, reason="Server shutdown")
            except Exception as e:
                logger.warning(f"Failed to close client {client_id}: {e}")
            self.disconnect(client_id)


manager = ConnectionManager()


def _error_frame(content: str, message_id: str) -> dict:
    return {"type": "error", "content": content, "messageId": message_id}


def handle_frame(responder, raw: str) -> dict:
    """Turn one inbound text frame into the outbound frame to send back."""
    message_id = _new_id("msg")

    if len(raw) > settings.MAX_WS_MESSAGE_SIZE:
        logger.warning(f"WebSocket message too large: {len(raw)} chars")
        return _error_frame("Message too large. Please send shorter messages.", message_id)

    try:
        payload = json.loads(raw)
    except ValueError:
        return _error_frame("Invalid message format. Please send valid JSON.", message_id)
    if not isinstance(payload, dict):
        return _error_frame("Invalid message format. Please send valid JSON.", message_id)

    if payload.get("type") == "ping":
        return {"type": "pong", "timestamp": _now()}

    content = payload.get("content")
    if not isinstance(content, str) or not content:
        return _error_frame('Message must include a "content" field.', message_id)
    content = content.strip()
    if not content:
        return _error_frame("Message cannot be empty.", message_id)

    intent, reply = responder.respond(content)
    return {
        "type": "message",
        "content": reply,
        "html": render_markdown(reply),
        "intent": intent,
        "timestamp": _now(),
        "messageId": message_id,
    }


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket):
    await websocket.accept()
    client_id = _new_id("ws")
    client_ip = websocket.client.host if websocket.client else "unknown"
    responder = build_responder()

    total = manager.connect(client_id, websocket)
    logger.info(f"WebSocket connected: client={client_id} ip={client_ip} total={total}")

    close_code: Optional[int] = None
    try:
        await websocket.send_json({
            "type": "message",
            "content": responder.welcome,
            "html": render_markdown(responder.welcome),
            "timestamp": _now(),
            "clientId": client_id,
        })

        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                close_code = message.get("code")
                break

            raw = message.get("text")
            if raw is None:
                raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")

            frame = handle_frame(responder, raw)
            await websocket.send_json(frame)
            logger.debug(f"WebSocket [{client_id}] -> {frame['type']}")

    except WebSocketDisconnect as e:
        close_code = e.code
    except Exception as e:
        metrics.record_error()
        logger.exception(f"WebSocket error: client={client_id}")
        try:
            detail = {"debug": str(e)} if settings.debug_mode else {}
            await websocket.send_json({
                "type": "error",
                "content": "Sorry, I encountered an error processing your message. Please try again.",
                **detail,
            })
        except Exception:
            logger.debug(f"Could not report error to client {client_id}")
    finally:
        remaining = manager.disconnect(client_id)
        logger.info(f"WebSocket disconnected: client={client_id} code={close_code} remaining={remaining}")
