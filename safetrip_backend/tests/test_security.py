from __future__ import annotations

import httpx
import pytest

from safetrip.core.security import SlidingWindowRateLimiter, SupabaseAuthVerifier, sanitize_html_text


def test_rate_limiter_blocks_after_limit() -> None:
    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=60)
    now = 1000.0

    assert limiter.allow("10.0.0.1", now) is True
    assert limiter.allow("10.0.0.1", now + 1) is True
    assert limiter.allow("10.0.0.1", now + 2) is False
    assert limiter.allow("10.0.0.2", now + 2) is True


def test_rate_limiter_allows_new_window() -> None:
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60)
    now = 1000.0

    assert limiter.allow("10.0.0.1", now) is True
    assert limiter.allow("10.0.0.1", now + 30) is False
    assert limiter.retry_after("10.0.0.1", now + 30) == 31
    assert limiter.allow("10.0.0.1", now + 61) is True


def test_sanitize_escapes_markup() -> None:
    assert sanitize_html_text('<script>alert("x")</script>') == "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;"
    assert sanitize_html_text("Pothole near O'Hare") == "Pothole near O&#x27;Hare"


def build_verifier(handler) -> SupabaseAuthVerifier:
    transport = httpx.MockTransport(handler)
    return SupabaseAuthVerifier("https://project.supabase.co", "anon-key", client=httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
async def test_verifier_returns_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/user"
        assert request.headers["Authorization"] == "Bearer good-token"
        assert request.headers["apikey"] == "anon-key"
        return httpx.Response(status_code=200, json={"id": "user-123", "email": "driver@example.com"})

    user = await build_verifier(handler).get_user("good-token")

    assert user is not None
    assert user["id"] == "user-123"


@pytest.mark.asyncio
async def test_verifier_rejects_bad_token() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=401, json={"msg": "invalid JWT"})

    assert await build_verifier(handler).get_user("bad-token") is None


@pytest.mark.asyncio
async def test_verifier_raises_on_outage() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=502)

    with pytest.raises(httpx.HTTPStatusError):
        await build_verifier(handler).get_user("token")


def test_rate_limiter_forgets_idle_clients() -> None:
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=60)

    limiter.allow("10.0.0.1", 0.0)
    limiter.allow("10.0.0.2", 10.0)
    assert limiter.tracked_keys == 2

    assert limiter.allow("10.0.0.3", 100.0) is True
    assert limiter.tracked_keys == 1
