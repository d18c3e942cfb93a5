"""
Request size / content-type guards and the shared rate limiter.
"""

from fastapi import HTTPException, Request
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from explorabot.config import settings
from explorabot.middleware.error_handler import error_response

limiter = Limiter(key_func=get_remote_address)

CHAT_RATE_LIMIT = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"


async def body_size_middleware(request: Request, call_next):
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > settings.MAX_REQUEST_BODY_SIZE:
        request_id = getattr(request.state, "request_id", None)
        logger.warning(f"Request body too large [{request_id}]: {length} bytes")
        return error_response(
            413,
            "Request body too large",
            details=f"Max size: {settings.MAX_REQUEST_BODY_SIZE} bytes",
            request_id=request_id,
        )
    return await call_next(request)


async def require_json(request: Request) -> None:
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        raise HTTPException(status_code=415, detail="Unsupported Media Type")
