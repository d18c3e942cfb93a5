"""
Global exception handling and the JSON error envelope.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from explorabot.config import settings
from explorabot.models.schemas import ErrorBody, ErrorResponse
from explorabot.services.metrics_service import metrics


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def error_response(
    status_code: int,
    message: str,
    details: Any = None,
    request_id: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    metrics.record_error()
    body = ErrorResponse(error=ErrorBody(
        message=message,
        code=status_code,
        timestamp=datetime.now(timezone.utc),
        details=details if settings.debug_mode else None,
        requestId=request_id or None,
    ))
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def global_exception_handler(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as exc:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return error_response(
            500,
            "Internal server error",
            details=f"{type(exc).__name__}: {exc}",
            request_id=_request_id(request),
        )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    details = None
    if exc.status_code == 404 and exc.detail == "Not Found":
        details = f"Route {request.url.path} not found"
    elif exc.status_code == 405:
        details = f"{request.method} not supported for {request.url.path}"
    elif exc.status_code == 415:
        details = "Content-Type must be application/json"
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(
        exc.status_code,
        message,
        details=details,
        request_id=_request_id(request),
        headers=getattr(exc, "headers", None),
    )


def _describe(err: dict) -> str:
    field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    msg = str(err.get("msg", "invalid value"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{field}: {msg}" if field else msg


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        message = "Invalid JSON"
    else:
        message = "Invalid request"
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return error_response(
        400,
        message,
        details="; ".join(_describe(e) for e in errors),
        request_id=_request_id(request),
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded on {request.url.path}")
    return error_response(
        429,
        "Too many requests",
        details=str(exc.detail),
        request_id=_request_id(request),
    )
