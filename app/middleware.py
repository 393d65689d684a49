"""Request/response logging middleware."""

from __future__ import annotations

import logging
import time

from fastapi import Request

logger = logging.getLogger("app.access")


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    body = await request.body()
    logger.info(
        "REQ: %s %s - Body: %s",
        request.method,
        request.url.path,
        body.decode("utf-8", errors="replace"),
    )

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "RES: %d - %s %s - %.1fms",
        response.status_code,
        request.method,
        request.url.path,
        duration_ms,
    )
    return response
