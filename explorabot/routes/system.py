"""
Health, debug and chat UI endpoints.
"""

import os
import platform
import sys
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse

from explorabot.config import settings
from explorabot.services.metrics_service import metrics
from explorabot.services.session_service import sessions

router = APIRouter(tags=["system"])

_UI_PATH = Path(__file__).resolve().parent.parent / "static" / "index.html"


@lru_cache(maxsize=1)
def _ui_template() -> str:
    return _UI_PATH.read_text(encoding="utf-8")


def render_chat_ui() -> str:
    return _ui_template().replace("{{APP_NAME}}", settings.APP_NAME)


@router.get("/health")
async def health():
    data = {
        "status": "healthy",
        "bot": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": f"{metrics.uptime_seconds}s",
        "environment": settings.ENVIRONMENT,
        "metrics": {
            "requestCount": metrics.request_count,
            "errorCount": metrics.error_count,
            "activeWebSocketConnections": metrics.ws_connections,
            "activeSessions": len(sessions),
        },
    }
    if settings.debug_mode:
        data["debug"] = {
            "pythonVersion": platform.python_version(),
            "platform": sys.platform,
        }
    return data


@router.get("/api/debug")
async def debug_info():
    if not settings.debug_mode:
        raise HTTPException(status_code=404, detail="Not Found")
    return {
        "environment": {
            "ENVIRONMENT": settings.ENVIRONMENT,
            "DEBUG_MODE": settings.debug_mode,
            "PORT": settings.PORT,
            "APP_NAME": settings.APP_NAME,
        },
        "server": {
            "uptime": metrics.uptime_seconds,
            "requestCount": metrics.request_count,
            "errorCount": metrics.error_count,
            "wsConnectionCount": metrics.ws_connections,
        },
        "process": {
            "pid": os.getpid(),
            "pythonVersion": platform.python_version(),
            "platform": sys.platform,
        },
        "engineStatus": {
            "sessions": len(sessions),
            "historyLength": sessions.total_turns(),
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/", response_class=HTMLResponse)
async def chat_ui():
    return HTMLResponse(render_chat_ui())
