"""HTTP middleware: request correlation, per-client rate limiting and the 500 fallback."""

from __future__ import annotations

import time
import uuid
from collections import deque
from typing import TYPE_CHECKING

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from foome.types import ErrorCode
from foome.web.errors import internal_error
from foome.web.responses import error_response

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds the caller's X-Request-ID (or a fresh UUID) to every log line of the request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Last line of defence: anything the exception handlers missed becomes a sanitized 500."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return internal_error(request, exc)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per client address on the JSON API.

    ``max_requests <= 0`` turns the limiter off. Paths outside ``prefix`` are
    never counted.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 120,
        window_seconds: int = 60,
        prefix: str = "/api/",
    ) -> None:
        super().__init__(app)
        self._max_requests = max_requests
        self._window = window_seconds
        self._prefix = prefix
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = 0.0

    def _sweep(self, now: float) -> None:
        """Forget clients whose newest hit has left the window."""
        idle = [
            client
            for client, hits in self._hits.items()
            if not hits or now - hits[-1] >= self._window
        ]
        for client in idle:
            del self._hits[client]
        self._last_sweep = now

    def _admit(self, client: str, now: float) -> bool:
        if now - self._last_sweep >= self._window:
            self._sweep(now)
        hits = self._hits.setdefault(client, deque())
        while hits and now - hits[0] >= self._window:
            hits.popleft()
        if len(hits) >= self._max_requests:
            return False
        hits.append(now)
        return True

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._max_requests <= 0 or not request.url.path.startswith(self._prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        if not self._admit(client, time.monotonic()):
            logger.warning("rate_limit_exceeded", client=client)
            return error_response(
                429,
                "Rate limit exceeded, retry shortly",
                ErrorCode.RATE_LIMITED,
                headers={"Retry-After": str(self._window)},
            )
        return await call_next(request)
