from __future__ import annotations
import logging
import time
import uuid
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("kigaku.requests")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (caller-supplied or fresh) for the access log."""

    async def dispatch(self, request: Request, call_next: Callable):
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = req_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = req_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, mode: str = "basic"):
        super().__init__(app)
        self.mode = mode

    async def dispatch(self, request: Request, call_next: Callable):
        if self.mode == "off":
            return await call_next(request)
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            dur_ms = (time.perf_counter() - start) * 1000.0
            req_id = getattr(request.state, "request_id", "-")
            if self.mode == "full":
                logger.info(
                    "%s %s qs=%s ua=%s => %s [%.1fms] rid=%s",
                    request.method, request.url.path, request.url.query,
                    request.headers.get("user-agent", "-"), status, dur_ms, req_id,
                )
            else:
                logger.info("%s %s => %s [%.1fms] rid=%s", request.method, request.url.path, status, dur_ms, req_id)
