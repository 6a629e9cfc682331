"""
In-process response cache with per-key TTL.

Entries expire lazily: a read that finds an expired entry purges it and
reports a miss. `purge_expired` reclaims entries nobody read again and is
driven by the expiry sweeper. With `max_entries` set the store also behaves
as a bounded LRU.
"""

from __future__ import annotations

import fnmatch
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shared.logging import get_logger


@dataclass
class CacheEntry:
    """A cached value and the epoch millisecond at which it stops being served."""

    key: str
    value: Any
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms >= self.expires_at


class CacheStore:
    """Key/value store with per-key expiration.

    All operations are synchronous and never suspend, so within a single
    event loop no reader can observe a half-written entry.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        *,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive or None")

        self.max_entries = max_entries
        self.logger = get_logger("storefront.cache_store")
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._evictions = 0

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, key: str) -> Optional[Any]:
        """Return the live value for `key`, or None."""
        if not key:
            raise ValueError("cache key must be non-empty")

        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._now_ms()):
            del self._entries[key]
            self._expired += 1
            self._misses += 1
            return None

        if self.max_entries is not None:
            self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store `value` under `key` for `ttl_seconds`, replacing any prior entry."""
        if not key:
            raise ValueError("cache key must be non-empty")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        expires_at = self._now_ms() + int(ttl_seconds * 1000)
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=expires_at)

        if self.max_entries is not None and len(self._entries) > self.max_entries:
            self._evict()

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern such as ``product:*``."""
        matched = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
        for key in matched:
            del self._entries[key]
        if matched:
            self.logger.info("Cleared cache pattern", pattern=pattern, keys_count=len(matched))
        return len(matched)

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        self.logger.info("Cache cleared", keys_count=count)

    def purge_expired(self) -> int:
        """Physically remove every expired entry and return how many were removed."""
        now_ms = self._now_ms()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now_ms)]
        for key in expired:
            del self._entries[key]
        self._expired += len(expired)
        return len(expired)

    def _evict(self) -> None:
        # Expired entries go first, then the least recently used one.
        if self.purge_expired() and len(self._entries) <= self.max_entries:
            return
        while len(self._entries) > self.max_entries:
            key, _ = self._entries.popitem(last=False)
            self._evictions += 1
            self.logger.debug("Evicted least recently used entry", key=key)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._now_ms())

    def stats(self) -> Dict[str, Any]:
        lookups = self._hits + self._misses
        return {
            "type": "memory",
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "hits": self._hits,
            "misses": self._misses,
            "hit_ratio": round(self._hits / lookups, 4) if lookups else 0.0,
            "expired": self._expired,
            "evictions": self._evictions,
        }
