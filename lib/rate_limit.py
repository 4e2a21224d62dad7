# =============================================================================
# lib/rate_limit.py - Sliding Window Rate Limiter
# =============================================================================
# Counts hits per key inside a moving time window. A key is whatever the
# caller groups requests by (e.g. "auth:203.0.113.7").
#
# Usage:
#   limiter = SlidingWindowLimiter()
#   rule = RateLimitRule("auth", max_requests=5, window_seconds=900, message="...")
#   retry_after = limiter.hit("auth:203.0.113.7", rule)
#   if retry_after is not None:
#       ...  # reject, tell the client to wait retry_after seconds
# =============================================================================

import math
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateLimitRule:
    """How many requests a key may make per window, and what to say when it can't."""
    name: str
    max_requests: int
    window_seconds: float
    message: str


class SlidingWindowLimiter:
    """
    In-memory sliding window limiter.

    Only allowed hits are recorded, so a client that keeps hammering a
    blocked key does not push its own window further out.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def hit(self, key: str, rule: RateLimitRule) -> int | None:
        """
        Record a request for `key` if the rule allows it.

        Returns:
            None if allowed, otherwise the whole seconds until a slot frees up
        """
        now = self._clock()
        window_start = now - rule.window_seconds

        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= rule.max_requests:
                return max(1, math.ceil(hits[0] + rule.window_seconds - now))

            hits.append(now)
            return None

    def remaining(self, key: str, rule: RateLimitRule) -> int:
        """Requests left for `key` in the current window."""
        window_start = self._clock() - rule.window_seconds
        with self._lock:
            live = sum(1 for ts in self._hits.get(key, ()) if ts > window_start)
        return max(0, rule.max_requests - live)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
