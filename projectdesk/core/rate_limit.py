import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import HTTPException, Request, status

from ..config import settings

logger = logging.getLogger(__name__)


class SlidingWindowCounter:
    """In-process hit counter; one deque of timestamps per key.

    Keys whose newest hit has left the window are dropped on the next sweep,
    so idle clients do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._last_sweep = clock()

    def hit(self, key: str, limit: int, window: int) -> float:
        """Record a hit and return 0, or the seconds to wait when over the limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep > window:
                self._sweep(now, window)
            bucket = self._hits.setdefault(key, deque())
            while bucket and now - bucket[0] > window:
                bucket.popleft()
            if len(bucket) >= limit:
                return max(window - (now - bucket[0]), 1.0)
            bucket.append(now)
            return 0.0

    def _sweep(self, now: float, window: int) -> None:
        stale = [key for key, bucket in self._hits.items() if not bucket or now - bucket[-1] > window]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def __len__(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


limiter = SlidingWindowCounter()


class RateLimit:
    """FastAPI dependency throttling one route group per client address."""

    def __init__(self, scope: str, limit: Optional[int] = None, window_seconds: Optional[int] = None) -> None:
        self.scope = scope
        self.limit = limit
        self.window_seconds = window_seconds

    def __call__(self, request: Request) -> None:
        limit = self.limit or settings.auth_rate_limit
        window = self.window_seconds or settings.auth_rate_window_seconds
        client = request.client.host if request.client else "anonymous"
        retry_after = limiter.hit(f"{self.scope}:{client}", limit, window)
        if retry_after:
            logger.warning("Rate limit hit for %s from %s.", self.scope, client)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests.",
                headers={"Retry-After": str(int(retry_after))},
            )
