"""
In-memory TTL Cache

Explicit cache object handed to whoever needs it (no module-level cache).
Entries carry their write time; the TTL is checked on read so that callers
may ask with a shorter TTL than the default.
"""

from typing import Any, Optional

import attrs

from src.platform.types.clock import Clock, monotonic_clock


@attrs.define
class CacheEntry:
    data: Any
    timestamp: float


class TtlCache:
    def __init__(self, *, default_ttl: float, clock: Clock = monotonic_clock) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str, ttl: Optional[float] = None) -> Any:
        """Return cached data, or None when missing or expired (expired entries are dropped)"""
        entry = self._entries.get(key)
        if entry is None:
            return None

        ttl = self._default_ttl if ttl is None else ttl
        if self._clock() - entry.timestamp > ttl:
            del self._entries[key]
            return None

        return entry.data

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock())

    def has(self, key: str, ttl: Optional[float] = None) -> bool:
        return self.get(key, ttl) is not None

    def clear(self, key_pattern: Optional[str] = None) -> None:
        """Drop every key containing key_pattern, or everything"""
        if key_pattern:
            for key in [k for k in self._entries if key_pattern in k]:
                del self._entries[key]
        else:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
