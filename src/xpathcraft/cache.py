from __future__ import annotations

import time
from typing import Any, Callable, Iterable

from .models import CacheEntry
from .tree import Node, TreeAdapter, index_in, is_body, tag_of

Clock = Callable[[], float]

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
SHADOW_PATH_MARKER = "#shadow"


class TtlCache:
    """Process-local map whose entries expire ``ttl_seconds`` after insertion."""

    def __init__(self, ttl_seconds: float, clock: Clock | None = None) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self.now()):
            del self._entries[key]
            return None
        return entry.payload

    def put(self, key: str, payload: Any) -> CacheEntry:
        entry = CacheEntry(key=key, payload=payload, created_at=self.now())
        self._entries[key] = entry
        return entry

    def evict_expired(self) -> int:
        now = self.now()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds


def element_fingerprint(adapter: TreeAdapter, node: Node) -> str:
    """Structural key: ``tag[childIndex]`` path up to body plus an attribute hash."""
    return f"{element_path(adapter, node)}_{hash_attributes(adapter.attributes(node))}"


def element_path(adapter: TreeAdapter, node: Node) -> str:
    path: list[str] = []
    current = node
    while current is not None and not is_body(adapter, current):
        parent = adapter.parent(current)
        if parent is not None:
            siblings = adapter.children(parent)
            host = None
        else:
            scope = adapter.shadow_scope_of(current)
            siblings = adapter.children(scope) if scope is not None else []
            host = adapter.shadow_host(scope) if scope is not None else None
        path.insert(0, f"{tag_of(adapter, current)}[{index_in(adapter, current, siblings)}]")
        if parent is None and host is not None:
            path.insert(0, SHADOW_PATH_MARKER)
            current = host
            continue
        current = parent
    return ">".join(path)


def hash_attributes(attributes: Iterable[tuple[str, str]]) -> str:
    joined = "|".join(sorted(f"{name}={value}" for name, value in attributes))
    # Rolling hash over UTF-16 code units, kept to a signed 32-bit range.
    units = joined.encode("utf-16-le")
    value = 0
    for offset in range(0, len(units), 2):
        code = int.from_bytes(units[offset : offset + 2], "little")
        value = _to_int32((value << 5) - value + code)
    return _to_base36(value)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    remaining = abs(value)
    digits: list[str] = []
    while remaining:
        remaining, digit = divmod(remaining, 36)
        digits.append(_BASE36_DIGITS[digit])
    return sign + "".join(reversed(digits))
