"""
Global middleware.
"""

from __future__ import annotations

import asyncio
import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from auth.errors import RequestTimeoutError

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI, timeout_seconds: float) -> None:
    """Attach the request timer and the per-request deadline."""

    @app.middleware("http")
    async def request_deadline(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "%s %s exceeded %.1fs deadline",
                request.method,
                request.url.path,
                timeout_seconds,
            )
            exc = RequestTimeoutError()
            return JSONResponse(status_code=exc.status_code, content={"msg": exc.message})

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response
