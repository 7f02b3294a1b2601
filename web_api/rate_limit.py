"""Simple in-memory rate limiter for grading submissions."""

import time
from collections import defaultdict

from fastapi import HTTPException


class RateLimiter:
    """
    Sliding-window rate limiter keyed by an arbitrary string (usually a user id).

    Each grading request spawns one sandbox process per test, so submissions
    are throttled per user.

    Args:
        max_requests: Maximum requests allowed in the window.
        window_seconds: Time window in seconds.
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        # {key: [timestamp, ...]}
        self._requests: dict[str, list[float]] = defaultdict(list)

    def check(self, key: str) -> None:
        """Raise 429 if `key` has used up its window."""
        now = time.monotonic()
        cutoff = now - self.window_seconds

        entries = [t for t in self._requests[key] if t > cutoff]
        if len(entries) >= self.max_requests:
            self._requests[key] = entries
            raise HTTPException(status_code=429, detail="Too many submissions")

        entries.append(now)
        self._requests[key] = entries

    def reset(self) -> None:
        self._requests.clear()


# Grading: 30 submissions per minute per user
grading_limiter = RateLimiter(max_requests=30, window_seconds=60)
