"""Fixed-window rate limiter for trigger runs."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class FixedWindowLimiter:
    """Single global counter that resets when its window expires.

    At most ``max_per_window`` acquisitions are granted per window of
    ``window`` seconds. A burst of up to twice that can straddle a window
    boundary.
    """

    def __init__(
        self,
        max_per_window: int = 3,
        window: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_per_window < 1:
            raise ValueError("max_per_window must be >= 1")
        if window <= 0:
            raise ValueError("window must be > 0")
        self._max = max_per_window
        self._window = window
        self._lock = threading.Lock()
        self._clock = clock
        self._window_start = clock()
        self._count = 0

    @property
    def max_per_window(self) -> int:
        return self._max

    @property
    def window(self) -> float:
        return self._window

    def _roll(self, now: float) -> None:
        if now - self._window_start > self._window:
            self._window_start = now
            self._count = 0

    def try_acquire(self, now: float | None = None) -> bool:
        if now is None:
            now = self._clock()
        with self._lock:
            self._roll(now)
            if self._count >= self._max:
                return False
            self._count += 1
            return True

    def retry_after(self, now: float | None = None) -> float:
        """Seconds until the current window is eligible for reset."""
        if now is None:
            now = self._clock()
        with self._lock:
            return max(0.0, self._window_start + self._window - now)

    def snapshot(self) -> tuple[float, int]:
        with self._lock:
            return self._window_start, self._count
