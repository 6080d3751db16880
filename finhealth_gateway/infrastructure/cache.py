"""In-process per-key result cache with time-based expiry"""

import threading
import time
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Keyed cache where each entry expires `ttl_seconds` after it was stored.

    Entries older than twice the TTL are swept on every write.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                return None
            return value

    def set(self, key: str, value: T) -> None:
        now = self._clock()
        with self._lock:
            self._entries[key] = (now, value)
            stale = [k for k, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds * 2]
            for k in stale:
                del self._entries[k]

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
