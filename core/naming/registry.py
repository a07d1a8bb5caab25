"""Short generated class names and the process-wide raw/merged mapping tables."""

from __future__ import annotations

import base64
import hashlib
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

MergeFn = Callable[[str], str]


def derive_short_name(merged: str, *, prefix: str = "tw-", length: int = 7) -> str:
    """Derive a stable identifier from a merged class string.

    SHA-1 of the merged text, URL-safe base64, truncated. Distinct merged
    strings may collide with small probability; no collision handling is done.
    """

    digest = hashlib.sha1(merged.encode("utf-8")).digest()
    encoded = base64.urlsafe_b64encode(digest).decode("ascii")
    return f"{prefix}{encoded[:length]}"


@dataclass(frozen=True)
class MappingSnapshot:
    """Point-in-time copy of both mapping tables, safe to export."""

    raw_to_name: dict[str, str] = field(default_factory=dict)
    name_to_merged: dict[str, str] = field(default_factory=dict)


class ClassNameRegistry:
    """Thread-safe raw -> short name and short name -> merged tables.

    Merging and hashing happen outside the lock; two threads racing on the
    same raw string compute the same name.
    """

    def __init__(self, merge: MergeFn, *, prefix: str = "tw-", length: int = 7) -> None:
        self._merge = merge
        self._prefix = prefix
        self._length = length
        self._raw_to_name: dict[str, str] = {}
        self._name_to_merged: dict[str, str] = {}
        self._lock = threading.Lock()

    def short_name(self, raw: str) -> str:
        key = raw.strip()
        with self._lock:
            known = self._raw_to_name.get(key)
        if known is not None:
            return known

        merged = self._merge(key)
        name = derive_short_name(merged, prefix=self._prefix, length=self._length)

        with self._lock:
            name = self._raw_to_name.setdefault(key, name)
            self._name_to_merged.setdefault(name, merged)
        return name

    def register_known_mapping(self, raw: str, name: str, merged: str | None = None) -> None:
        self.register_known_mappings({raw: name}, None if merged is None else {name: merged})

    def register_known_mappings(
        self, mapping: Mapping[str, str], merged: Mapping[str, str] | None = None
    ) -> None:
        """Pre-seed raw -> name pairs, typically from generated code.

        ``merged`` maps names to their merged strings and is stored as given;
        only names it does not cover are merged here.
        """

        merged_by_name = dict(merged or {})
        for raw, name in mapping.items():
            if name not in merged_by_name:
                merged_by_name[name] = self._merge(raw.strip())
        with self._lock:
            for raw, name in mapping.items():
                self._raw_to_name[raw.strip()] = name
                self._name_to_merged[name] = merged_by_name[name]

    def lookup(self, raw: str) -> str | None:
        with self._lock:
            return self._raw_to_name.get(raw.strip())

    def merged_for(self, name: str) -> str | None:
        with self._lock:
            return self._name_to_merged.get(name)

    def snapshot(self) -> MappingSnapshot:
        with self._lock:
            return MappingSnapshot(
                raw_to_name=dict(self._raw_to_name),
                name_to_merged=dict(self._name_to_merged),
            )

    def clear(self) -> None:
        with self._lock:
            self._raw_to_name.clear()
            self._name_to_merged.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._raw_to_name)
