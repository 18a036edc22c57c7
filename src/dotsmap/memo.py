"""Explicit get-or-compute cache for derived dataset queries."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

_LOGGER = logging.getLogger("dotsmap.memo")

T = TypeVar("T")


class QueryCache(Generic[T]):
    """Unbounded cache keyed by normalized query strings.

    Entries are never evicted: the dataset behind every cached query is
    immutable for the lifetime of the owning query object. A lock guards
    population so concurrent callers cannot corrupt the mapping; when two
    callers race on the same key the first stored value wins and is returned
    to both.
    """

    def __init__(self, name: str = "query") -> None:
        self.name = name
        self._entries: dict[str, T] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_or_compute(self, key: str, factory: Callable[[str], T]) -> T:
        with self._lock:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]
        value = factory(key)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                self.hits += 1
                return existing
            self.misses += 1
            self._entries[key] = value
        _LOGGER.debug("%s cache miss for %r (%d entries)", self.name, key, len(self._entries))
        return value
