"""Client-side pacing for Torn API requests.

Torn allows a fixed number of calls per minute for each API key, so every key
gets its own queued window.
"""
import asyncio
import time
from collections import deque
from typing import Deque, Dict


class RateLimiter:
    """Rate limiter ensuring at most ``max_requests`` per window and per key.

    Uses a strict queued window scheduler. Across any ``time_window`` span,
    at most ``max_requests`` calls are permitted for one key, and concurrent
    callers are serialized by reserving future slots.
    """

    def __init__(self, max_requests: int = 100, time_window: float = 60.0):
        """Initialize the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in time window
            time_window: Time window in seconds

        Raises:
            ValueError: If max_requests or time_window is not positive
        """
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if time_window <= 0:
            raise ValueError("time_window must be positive")

        self.max_requests = max_requests
        self.time_window = time_window
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = asyncio.Lock()

    def _window(self, key: str, current_time: float) -> Deque[float]:
        """Drop expired timestamps; keys with nothing left are forgotten."""
        requests = self._windows.get(key)
        if requests is None:
            return deque()
        while requests and current_time - requests[0] >= self.time_window:
            requests.popleft()
        if not requests:
            del self._windows[key]
        return requests

    def _reserve_slot(self, key: str) -> float:
        """Reserve the next queued request slot for a key.

        Returns:
            Sleep time in seconds before the caller can proceed.
        """
        current_time = time.monotonic()
        requests = self._window(key, current_time)

        if len(requests) < self.max_requests:
            scheduled_time = current_time
        else:
            # Compare against the request `max_requests` slots behind.
            scheduled_time = max(
                current_time,
                requests[-self.max_requests] + self.time_window,
            )

        requests.append(scheduled_time)
        self._windows[key] = requests
        return max(0.0, scheduled_time - current_time)

    async def wait_if_needed(self, key: str = "") -> None:
        """Wait if necessary to keep ``key`` under its limit."""
        async with self._lock:
            sleep_time = self._reserve_slot(key)

        if sleep_time > 0:
            await asyncio.sleep(sleep_time)

    def get_current_rate(self, key: str = "") -> int:
        """Get the number of requests made for ``key`` in the current window."""
        current_time = time.monotonic()
        requests = self._window(key, current_time)
        return sum(1 for request_time in requests if request_time <= current_time)
