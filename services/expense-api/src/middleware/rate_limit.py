import asyncio
import time
from collections import defaultdict, deque
from typing import Callable, NamedTuple

API_PATH_PREFIX = "/api/"
DEFAULT_WINDOW_SECONDS = 15 * 60


class RateLimitDecision(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    retry_after: float

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if not self.allowed:
            headers["Retry-After"] = str(max(1, int(self.retry_after + 0.999)))
        return headers


class SimpleRateLimiter:
    """
    Sliding-window rate limiter keyed by client identifier (IP).

    Keeps per-key deques of recent request times in process memory, so each API
    process enforces its own budget.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._max_requests = max(1, max_requests)
        self._window_seconds = max(1, window_seconds)
        self._clock = clock
        self._buckets: dict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    async def check(self, client_id: str) -> RateLimitDecision:
        """Record a request for `client_id` unless its window is already full."""
        now = self._clock()
        async with self._lock:
            bucket = self._buckets[client_id]
            self._evict_old(bucket, now)

            if len(bucket) >= self._max_requests:
                retry_after = self._window_seconds - (now - bucket[0])
                return RateLimitDecision(False, self._max_requests, 0, max(retry_after, 0.0))

            bucket.append(now)
            return RateLimitDecision(True, self._max_requests, self._max_requests - len(bucket), 0.0)

    def remaining(self, client_id: str) -> int:
        bucket = self._buckets.get(client_id)
        if not bucket:
            return self._max_requests
        self._evict_old(bucket, self._clock())
        return max(self._max_requests - len(bucket), 0)

    def _evict_old(self, bucket: deque[float], now: float) -> None:
        threshold = now - self._window_seconds
        while bucket and bucket[0] <= threshold:
            bucket.popleft()


def is_rate_limited_path(path: str) -> bool:
    return path.startswith(API_PATH_PREFIX)


def build_rate_limiter(max_requests: int, window_seconds: int) -> SimpleRateLimiter:
    return SimpleRateLimiter(max_requests=max_requests, window_seconds=window_seconds)
