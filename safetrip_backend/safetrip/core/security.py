"""
SafeTrip — Request Security
Bearer-token authentication against Supabase Auth, input sanitizing,
a sliding-window rate limiter and response hardening headers.
"""

import html
import logging
import time
from collections import defaultdict, deque
from typing import Any, Optional

import httpx
from fastapi import Header, Request

from safetrip.core.errors import ApiError

logger = logging.getLogger("safetrip.security")

MOCK_USER = {"id": "mock-user-id"}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
}


def sanitize_html_text(value: str) -> str:
    return html.escape(value, quote=True)


# ═══════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════

class SupabaseAuthVerifier:
    """Resolves a bearer token to a user via `GET {url}/auth/v1/user`."""

    def __init__(self, supabase_url: str, api_key: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self._base_url = supabase_url.rstrip("/")
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=5.0)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_user(self, token: str) -> Optional[dict[str, Any]]:
        """Return the user record, or None if the token is rejected."""
        response = await self._client.get(
            f"{self._base_url}/auth/v1/user",
            headers={"apikey": self._api_key, "Authorization": f"Bearer {token}"},
        )
        if response.status_code in (401, 403):
            return None
        response.raise_for_status()
        user = response.json()
        if not isinstance(user, dict) or not user.get("id"):
            return None
        return user


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> dict[str, Any]:
    """FastAPI dependency: the authenticated user, or a 401/500 ApiError."""
    client_ip = request.client.host if request.client else "unknown"

    if not authorization or not authorization.startswith("Bearer "):
        logger.warning(f"Unauthorized access attempt from IP: {client_ip}")
        raise ApiError(status_code=401, message="No token provided")

    token = authorization.split(" ", 1)[1]
    verifier: Optional[SupabaseAuthVerifier] = getattr(request.app.state, "auth_verifier", None)

    if verifier is None:
        logger.info("Auth running in mock mode, accepting token")
        return dict(MOCK_USER)

    try:
        user = await verifier.get_user(token)
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Auth error: {e}")
        raise ApiError(status_code=500, message="Internal server error during authentication") from e

    if user is None:
        logger.error(f"Suspicious activity: invalid token from IP: {client_ip}")
        raise ApiError(status_code=401, message="Invalid or expired token")
    return user


# ═══════════════════════════════════════════════════════════════
# Rate Limiting
# ═══════════════════════════════════════════════════════════════

class SlidingWindowRateLimiter:
    """Per-key request counter over a trailing time window (in-process)."""

    def __init__(self, limit: int = 100, window_seconds: float = 900.0) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._requests: dict[str, deque[float]] = defaultdict(deque)
        self._last_sweep: Optional[float] = None

    @property
    def tracked_keys(self) -> int:
        return len(self._requests)

    def _sweep(self, cutoff: float) -> None:
        # Forget keys whose newest request already left the window
        for key in [k for k, q in self._requests.items() if not q or q[-1] <= cutoff]:
            del self._requests[key]

    def allow(self, key: str, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        cutoff = now - self.window_seconds
        if self._last_sweep is None or now - self._last_sweep >= self.window_seconds:
            self._sweep(cutoff)
            self._last_sweep = now

        queue = self._requests[key]
        while queue and queue[0] <= cutoff:
            queue.popleft()
        if len(queue) >= self.limit:
            return False
        queue.append(now)
        return True

    def retry_after(self, key: str, now: Optional[float] = None) -> int:
        """Seconds until the oldest request in the window expires."""
        now = time.monotonic() if now is None else now
        queue = self._requests.get(key)
        if not queue:
            return 0
        return max(0, int(queue[0] + self.window_seconds - now) + 1)
