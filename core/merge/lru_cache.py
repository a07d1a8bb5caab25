"""Bounded least-recently-used cache for merged class strings."""

from __future__ import annotations

import threading
from collections import OrderedDict

from core.utils.errors import ConfigError


class LRUCache:
    """Thread-safe LRU mapping of trimmed input strings to merged output.

    ``get`` returns ``None`` for a miss, so an empty merged string is a
    legitimate cached value.
    """

    def __init__(self, max_capacity: int) -> None:
        if max_capacity <= 0:
            raise ConfigError(f"Cache capacity must be positive, got {max_capacity}")
        self._max_capacity = max_capacity
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_capacity(self) -> int:
        return self._max_capacity

    def get(self, key: str) -> str | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""

        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
