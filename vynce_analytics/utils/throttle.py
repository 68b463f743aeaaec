"""Cooldown gate and freshness cache for recomputation triggers"""
import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar('T')

class CooldownGate:
    """
    Admits one trigger per cooldown window.

    A trigger arriving inside the window is dropped, not queued.
    """

    def __init__(self, cooldown_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_admitted: Optional[float] = None

    def try_acquire(self) -> bool:
        now = self._clock()
        if self._last_admitted is not None and now - self._last_admitted < self.cooldown_seconds:
            return False
        self._last_admitted = now
        return True

    def reset(self) -> None:
        self._last_admitted = None

class FreshnessCache(Generic[T]):
    """Keyed values reused until they are older than `ttl_seconds`"""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, T]] = {}

    def get(self, key: Hashable) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: T) -> None:
        self._entries[key] = (self._clock(), value)

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        """Return the fresh cached value, or call `loader` and cache its result"""
        value = self.get(key)
        if value is None:
            value = loader()
            self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
