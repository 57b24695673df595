from __future__ import annotations

import time
from typing import Awaitable, Callable

from fastapi import Request, Response

from pansou.shared.logging import get_logger

logger = get_logger("gateway.http")


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
        client=request.client.host if request.client else None,
    )
    return response


__all__ = ["log_requests"]
