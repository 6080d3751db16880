"""Per-user sliding-window rate limiting for API endpoints"""

import logging
import math
import threading
import time
from typing import Callable, Dict, List

from fastapi import HTTPException, Query

from finhealth_gateway.config import settings
from finhealth_gateway.infrastructure.observability.metrics import rate_limited_counter


class RateLimiter:
    """
    Allow at most `max_requests` per user within a rolling `window_seconds`.

    Timestamps are kept in memory per user. Users with no request inside the
    window are swept on every check.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def _cleanup(self, now: float) -> None:
        cutoff = now - self.window_seconds
        expired = [
            user_id
            for user_id, timestamps in self._timestamps.items()
            if not timestamps or timestamps[-1] <= cutoff
        ]
        for user_id in expired:
            del self._timestamps[user_id]

    def hit(self, user_id: str) -> bool:
        """Record a request; False if the user is over the limit"""
        now = self._clock()
        with self._lock:
            self._cleanup(now)
            cutoff = now - self.window_seconds
            timestamps = [t for t in self._timestamps.get(user_id, []) if t > cutoff]
            if len(timestamps) >= self.max_requests:
                self._timestamps[user_id] = timestamps
                return False
            timestamps.append(now)
            self._timestamps[user_id] = timestamps
            return True

    def retry_after(self, user_id: str) -> int:
        """Seconds until the oldest request in the window expires"""
        with self._lock:
            timestamps = self._timestamps.get(user_id)
            if not timestamps:
                return 0
            remaining = timestamps[0] + self.window_seconds - self._clock()
        return max(1, math.ceil(remaining))

    def reset(self) -> None:
        with self._lock:
            self._timestamps.clear()

    def __len__(self) -> int:
        return len(self._timestamps)


recurring_rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)


def enforce_recurring_rate_limit(
    user_id: str = Query(..., min_length=1, description="User identifier"),
) -> str:
    """Dependency that rejects users over the recurring-detection rate limit"""
    if not recurring_rate_limiter.hit(user_id):
        rate_limited_counter.inc()
        logging.warning("Rate limit hit", extra={"user_id": user_id, "step": "rate_limit"})
        raise HTTPException(
            status_code=429,
            detail="Too many requests",
            headers={"Retry-After": str(recurring_rate_limiter.retry_after(user_id))},
        )
    return user_id
