"""In-memory TTL cache with insertion-order eviction."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_TTL = 300.0
DEFAULT_CAPACITY = 1000


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    inserted_at: float


class TTLCache:
    """
    Bounded key-value store with time-to-live expiry.

    - An entry inserted at ``T`` is returned up to and including ``T + ttl``
      and treated as absent afterwards; expired entries are dropped when
      looked up (no background sweep).
    - When a new key would exceed ``capacity``, the entry with the oldest
      insertion time is evicted first. Reads do not refresh entries.

    Every method holds an internal lock for its own duration only, so the
    cache can be shared by concurrent resolutions (tasks or threads).
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl: float = DEFAULT_TTL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive: {capacity}")
        if ttl <= 0:
            raise ValueError(f"Cache TTL must be positive: {ttl}")
        self.capacity = capacity
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Get a fresh value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at > self.ttl:
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: Any) -> None:
        """Insert or overwrite a value, evicting the oldest entry if full."""
        with self._lock:
            if key in self._entries:
                # Overwriting counts as a fresh insertion
                del self._entries[key]
            while len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[key] = _CacheEntry(value=value, inserted_at=self._clock())

    def delete(self, key: str) -> bool:
        """Delete a key, returning whether it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet looked up."""
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None
