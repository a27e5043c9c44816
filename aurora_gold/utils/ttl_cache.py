# -*- coding: utf-8 -*-
"""
In-process response cache with time-based and size-based eviction.

Entries are kept in insertion order; once the map grows past
``max_entries`` the oldest inserted key is dropped. Reads ignore and
remove entries older than ``ttl_seconds``.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value:     T
    timestamp: float


class TTLCache(Generic[T]):

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 100,
        clock:       Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock      = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.timestamp < self.ttl_seconds:
            return entry.value
        self._entries.pop(key, None)
        return None

    def set(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())
        if len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
