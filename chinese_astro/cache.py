"""
Bounded in-process cache with LRU eviction and optional max age.

Shared by the birth chart orchestrator and the compatibility engine.
Values cached here are pure functions of their key, so concurrent writers
racing on the same key are harmless: the last write wins.
"""

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable

from chinese_astro.settings import CachePolicy

_MISSING = object()


class BoundedCache:
    def __init__(self, policy: CachePolicy, clock: Callable[[], float] = time.monotonic):
        self.policy = policy
        self._clock = clock
        self._entries: OrderedDict = OrderedDict()  # key -> (stored_at, value)
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _expired(self, stored_at: float) -> bool:
        max_age = self.policy.max_age_seconds
        return max_age is not None and self._clock() - stored_at > max_age

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is _MISSING:
                self.misses += 1
                return default
            stored_at, value = entry
            if self._expired(stored_at):
                del self._entries[key]
                self.misses += 1
                return default
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.policy.max_entries:
                self._entries.popitem(last=False)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is _MISSING:
                return False
            if self._expired(entry[0]):
                del self._entries[key]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        return {
            "size": len(self),
            "max_entries": self.policy.max_entries,
            "max_age_seconds": self.policy.max_age_seconds,
            "hits": self.hits,
            "misses": self.misses,
        }
