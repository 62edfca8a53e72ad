"""Bounded cache of resolved themes.

One instance lives for one decode and is shared by every slide, so slides
pointing at the same theme part resolve it once. Eviction removes the entry
with the lowest recency-weighted access score.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value plus its usage bookkeeping."""

    value: Any
    sequence: int
    last_accessed: float
    access_count: int = 0


class ThemeCache:
    """Thread-safe, size-bounded theme cache.

    The score of an entry is ``(access_count + 1) / (1 + age)`` where ``age``
    is the time since its last access in seconds. The lowest score is evicted;
    among equal scores the oldest insertion goes first.
    """

    def __init__(self, max_size: int = 10, clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sequence = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, theme_id: str) -> bool:
        return self.has(theme_id)

    def get(self, theme_id: str) -> Any | None:
        """Get a cached theme, recording the access. None on a miss."""
        with self._lock:
            entry = self._entries.get(theme_id)
            if entry is None:
                self._misses += 1
                return None
            entry.access_count += 1
            entry.last_accessed = self._clock()
            self._hits += 1
            return entry.value

    def set(self, theme_id: str, value: Any) -> None:
        """Store a theme, evicting one entry first when the cache is full.

        Overwriting an existing id keeps its usage counters.
        """
        with self._lock:
            now = self._clock()
            existing = self._entries.get(theme_id)
            if existing is not None:
                existing.value = value
                existing.last_accessed = now
                return
            if len(self._entries) >= self.max_size:
                self._evict(now)
            self._sequence += 1
            self._entries[theme_id] = CacheEntry(
                value=value,
                sequence=self._sequence,
                last_accessed=now,
            )

    def get_or_create(self, theme_id: str, factory: Callable[[], Any]) -> Any:
        """Get a theme, building and storing it on a miss.

        ``factory`` runs outside the lock; two threads missing at once both
        build the theme and the later write wins.
        """
        value = self.get(theme_id)
        if value is not None:
            return value
        value = factory()
        self.set(theme_id, value)
        return value

    def has(self, theme_id: str) -> bool:
        with self._lock:
            return theme_id in self._entries

    def delete(self, theme_id: str) -> bool:
        with self._lock:
            return self._entries.pop(theme_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Hit/miss counters and the most used entry."""
        with self._lock:
            lookups = self._hits + self._misses
            most_used = max(
                self._entries.items(),
                key=lambda item: item[1].access_count,
                default=(None, None),
            )[0]
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": self._hits / lookups if lookups else 0.0,
                "most_used": most_used,
            }

    def _score(self, entry: CacheEntry, now: float) -> float:
        age = max(now - entry.last_accessed, 0.0)
        return (entry.access_count + 1) / (1.0 + age)

    def _evict(self, now: float) -> None:
        victim = min(
            self._entries.items(),
            key=lambda item: (self._score(item[1], now), item[1].sequence),
        )[0]
        del self._entries[victim]
        self._evictions += 1
        logger.debug(f"Evicted theme {victim} from cache")
