"""
SafeTrip — HTTP Middleware
Request logging, response hardening headers, body size cap and
per-IP rate limiting for the /api surface.
"""

import logging
from time import perf_counter

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from safetrip.core.security import SECURITY_HEADERS, SlidingWindowRateLimiter

logger = logging.getLogger("safetrip.http")

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after 15 minutes"


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        started = perf_counter()
        response = await call_next(request)
        duration_ms = (perf_counter() - started) * 1000.0
        logger.info(
            f"{_client_ip(request)} {request.method} {request.url.path} "
            f"{response.status_code} {duration_ms:.1f}ms"
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware:
    """
    Answers 413 when a request body exceeds `max_bytes`.

    A declared Content-Length is checked up front. Bodies without one
    (chunked uploads) are buffered up to the cap and replayed to the app.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self._max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        declared = request.headers.get("content-length")
        if declared is not None:
            if declared.isdigit() and int(declared) > self._max_bytes:
                await self._reject(request, declared, scope, receive, send)
                return
            await self.app(scope, receive, send)
            return

        messages: list[Message] = []
        received = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self._max_bytes:
                await self._reject(request, f"{received}+", scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, request: Request, size: str, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning(f"Rejected {size}-byte body from IP: {_client_ip(request)}")
        response = JSONResponse(status_code=413, content={"error": "Request body too large"})
        await response(scope, receive, send)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: SlidingWindowRateLimiter, path_prefix: str = "/api/") -> None:
        super().__init__(app)
        self._limiter = limiter
        self._path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        if not request.url.path.startswith(self._path_prefix):
            return await call_next(request)

        ip = _client_ip(request)
        if not self._limiter.allow(ip):
            logger.warning(f"Rate limit exceeded for IP: {ip}")
            return JSONResponse(
                status_code=429,
                content={"error": RATE_LIMIT_MESSAGE},
                headers={"Retry-After": str(self._limiter.retry_after(ip))},
            )
        return await call_next(request)
