"""In-memory fixed-window request throttle.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from storefront.adapters.throttle.base import AbstractRequestThrottle, ThrottleResult


class InMemoryFixedWindowThrottle(AbstractRequestThrottle):
    """Counts requests per client in fixed windows (e.g. 100 per 15 minutes).

    Counters from earlier windows are dropped lazily whenever a new window
    starts, so memory stays proportional to the clients seen in one window.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._window_start: int | None = None
        self._counts: dict[str, int] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _roll_window(self, now: float) -> int:
        window_start = int(now // self._window_seconds) * self._window_seconds
        if window_start != self._window_start:
            self._window_start = window_start
            self._counts.clear()
        return window_start + self._window_seconds

    def hit(self, client_key: str) -> ThrottleResult:
        if not client_key:
            raise ValueError("client_key must be a non-empty string")

        now = self._clock()
        with self._lock:
            reset_at = self._roll_window(now)
            used = self._counts.get(client_key, 0)

            if used < self._limit:
                self._counts[client_key] = used + 1
                return ThrottleResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - used - 1,
                    reset_at=reset_at,
                )

        return ThrottleResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=max(1, int(math.ceil(reset_at - now))),
        )
