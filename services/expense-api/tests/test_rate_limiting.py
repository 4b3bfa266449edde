import asyncio

from fastapi.testclient import TestClient
from main import app
from middleware.rate_limit import SimpleRateLimiter, is_rate_limited_path


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_rate_limit_returns_429_after_threshold() -> None:
    original_limiter = app.state.rate_limiter
    app.state.rate_limiter = SimpleRateLimiter(max_requests=2, window_seconds=60)
    try:
        with TestClient(app) as client:
            first = client.get("/api/health")
            second = client.get("/api/health")

            assert first.status_code == 200
            assert first.headers["X-RateLimit-Limit"] == "2"
            assert first.headers["X-RateLimit-Remaining"] == "1"
            assert second.status_code == 200
            assert second.headers["X-RateLimit-Remaining"] == "0"

            blocked = client.get("/api/health")
            assert blocked.status_code == 429
            payload = blocked.json()
            assert payload["error"] == "rate_limit_exceeded"
            assert 1 <= int(blocked.headers["Retry-After"]) <= 60
    finally:
        app.state.rate_limiter = original_limiter


def test_window_slides_forward() -> None:
    clock = FakeClock()
    limiter = SimpleRateLimiter(max_requests=1, window_seconds=900, clock=clock)

    async def scenario():
        first = await limiter.check("1.2.3.4")
        clock.now += 600
        denied = await limiter.check("1.2.3.4")
        other_client = await limiter.check("5.6.7.8")
        clock.now += 300
        remaining = limiter.remaining("1.2.3.4")
        after_window = await limiter.check("1.2.3.4")
        return first, denied, other_client, remaining, after_window

    first, denied, other_client, remaining, after_window = asyncio.run(scenario())

    assert first.allowed is True
    assert denied.allowed is False
    assert denied.retry_after == 300
    assert other_client.allowed is True
    assert remaining == 1
    assert after_window.allowed is True


def test_only_api_paths_are_limited() -> None:
    assert is_rate_limited_path("/api/expenses")
    assert not is_rate_limited_path("/docs")
    assert not is_rate_limited_path("/openapi.json")
