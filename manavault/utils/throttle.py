"""
Fixed-interval request gate for outbound API calls.

Scryfall asks clients to leave 50-100 ms between requests. A RequestThrottle
is owned by whoever makes the calls (the app's ScryfallClient) instead of
living in module globals, so tests can build their own with a fake clock
and reset it between cases.
"""
import threading
import time


class RequestThrottle:
    """Guarantee at least ``min_interval`` seconds between successive wait() returns."""

    def __init__(self, min_interval: float = 0.1, clock=time.monotonic, sleep=time.sleep):
        self.min_interval = max(0.0, float(min_interval))
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until the next request may go out. Returns the seconds slept."""
        with self._lock:
            slept = 0.0
            if self._last is not None:
                elapsed = self._clock() - self._last
                if elapsed < self.min_interval:
                    slept = self.min_interval - elapsed
                    self._sleep(slept)
            self._last = self._clock()
            return slept

    def reset(self) -> None:
        with self._lock:
            self._last = None
