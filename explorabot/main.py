"""
EXPLORABOT — FastAPI entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from explorabot.config import settings, setup_logging
from explorabot.middleware.error_handler import (
    global_exception_handler,
    http_exception_handler,
    rate_limit_exceeded_handler,
    validation_exception_handler,
)
from explorabot.middleware.limits import body_size_middleware, limiter
from explorabot.middleware.logging_middleware import logging_middleware
from explorabot.services.metrics_service import metrics
from explorabot.services.session_service import sessions

# ── Routes ───────────────────────────────────────────────
from explorabot.routes.chat import router as chat_router
from explorabot.routes.system import router as system_router
from explorabot.routes.ws import manager as ws_manager
from explorabot.routes.ws import router as ws_router


# ── Lifespan ─────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"🤖 Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"🌍 Environment: {settings.ENVIRONMENT}")
    logger.info(f"🔧 Debug Mode: {'ENABLED' if settings.debug_mode else 'DISABLED'}")
    metrics.mark_started()
    yield
    logger.info("📴 Shutting down gracefully...")
    await ws_manager.close_all()
    logger.info(
        f"👋 Shutdown complete: uptime={metrics.uptime_seconds}s "
        f"requests={metrics.request_count} errors={metrics.error_count} sessions={len(sessions)}"
    )


# ── App ──────────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Zero-code assistant chatbot API",
    lifespan=lifespan,
)

# ── Rate Limiter ─────────────────────────────────────────
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# ── Error Envelope ───────────────────────────────────────
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# ── CORS ─────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

# ── Custom Middleware ────────────────────────────────────
app.middleware("http")(global_exception_handler)
app.middleware("http")(body_size_middleware)
app.middleware("http")(logging_middleware)

# ── Register Routers ────────────────────────────────────
app.include_router(system_router)
app.include_router(chat_router)
app.include_router(ws_router)


def run(host: str = None, port: int = None, reload: bool = False) -> None:
    import uvicorn
    uvicorn.run(
        "explorabot.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
        log_level="debug" if settings.debug_mode else "info",
        ws_ping_interval=settings.HEARTBEAT_INTERVAL,
        ws_ping_timeout=settings.HEARTBEAT_INTERVAL,
    )


# ── Run ──────────────────────────────────────────────────
if __name__ == "__main__":
    run(reload=settings.DEBUG)
