"""
Request / response logging middleware.
"""

import secrets
import time

from fastapi import Request
from loguru import logger

from explorabot.services.metrics_service import metrics


def generate_request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


async def logging_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id", "")[:100] or generate_request_id()
    request.state.request_id = request_id
    metrics.record_request()

    start = time.perf_counter()
    logger.info(f"→ {request.method} {request.url.path} [{request_id}]")

    response = await call_next(request)

    elapsed = round((time.perf_counter() - start) * 1000, 2)
    logger.info(f"← {request.method} {request.url.path} [{response.status_code}] {elapsed}ms")

    response.headers["X-Request-ID"] = request_id
    return response
