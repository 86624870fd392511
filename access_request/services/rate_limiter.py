# =======================================================================================
# access_request/services/rate_limiter.py - Per-Actor Request Throttling
# =======================================================================================
"""
Sliding-window rate limiting of access requests.

The in-memory limiter is per-process. Deployments running several workers
get one window per worker; put a shared limiter behind the same interface
if that matters.
"""
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict, deque
from typing import Callable, Deque


class RateLimiter(ABC):
    """Allow/register contract used to gate access requests."""

    @abstractmethod
    def is_allowed(self, key: str, limit: int, window: float) -> bool:
        """True if fewer than `limit` events were registered for `key` in the last `window` seconds."""

    @abstractmethod
    def register(self, key: str, window: float) -> None:
        """Record one event for `key`; it counts for `window` seconds."""

    def check_and_register(self, key: str, limit: int, window: float) -> bool:
        """Check and record in one step. Subclasses should make this atomic."""
        if not self.is_allowed(key, limit, window):
            return False
        self.register(key, window)
        return True


class InMemoryRateLimiter(RateLimiter):
    """Keyed sliding-window limiter. A limit or window of 0 or less disables limiting."""

    def __init__(self, max_keys: int = 20000, clock: Callable[[], float] = time.monotonic):
        self._max_keys = max_keys if max_keys > 0 else 20000
        self._clock = clock
        self._events: "OrderedDict[str, Deque[float]]" = OrderedDict()
        self._lock = threading.Lock()

    def _recent(self, key: str, window: float, now: float) -> Deque[float]:
        """Events for key still inside the window. Caller holds the lock."""
        events = self._events.get(key)
        if events is None:
            return deque()
        while events and now - events[0] >= window:
            events.popleft()
        return events

    def _append(self, key: str, now: float) -> None:
        events = self._events.get(key)
        if events is None:
            events = deque()
            self._events[key] = events
        events.append(now)
        self._events.move_to_end(key)
        # Evict least recently used keys to bound memory
        while len(self._events) > self._max_keys:
            self._events.popitem(last=False)

    def is_allowed(self, key: str, limit: int, window: float) -> bool:
        if limit <= 0 or window <= 0:
            return True
        with self._lock:
            return len(self._recent(key, window, self._clock())) < limit

    def register(self, key: str, window: float) -> None:
        if window <= 0:
            return
        with self._lock:
            now = self._clock()
            self._recent(key, window, now)
            self._append(key, now)

    def check_and_register(self, key: str, limit: int, window: float) -> bool:
        if limit <= 0 or window <= 0:
            return True
        with self._lock:
            now = self._clock()
            if len(self._recent(key, window, now)) >= limit:
                return False
            self._append(key, now)
            return True
