"""Fixed-window request limiter keyed by client identity."""

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class WindowState:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Allow at most max_requests per window_seconds for each key.

    Construct one per process and pass it to whatever needs it; state lives
    on the instance only.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, WindowState] = {}

    def allow(self, key: str) -> bool:
        """Record a request for key; False if its window is exhausted."""
        now = self._clock()
        state = self._windows.get(key)

        if state is None or now > state.reset_at:
            self._windows[key] = WindowState(count=1, reset_at=now + self.window_seconds)
            return True

        if state.count >= self.max_requests:
            return False

        state.count += 1
        return True

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)
