"""
Time-bounded cache of detected entity formats.

Entries are keyed by the raw entity string. An entry is valid while
``now - timestamp < ttl``; expired entries are evicted lazily on lookup.
"""
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .types import EntityFormat

DEFAULT_CACHE_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    format: EntityFormat
    timestamp: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


class FormatCache:
    """Positive-detection cache with an injectable clock."""
    
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
    
    def get(self, entity: str) -> Optional[EntityFormat]:
        """Return the cached format, or None on miss or expiry."""
        entry = self._entries.get(entity)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            self._entries.pop(entity, None)
            return None
        return entry.format
    
    def set(self, entity: str, entity_format: EntityFormat) -> None:
        """Store a concrete format; ANY is never cached."""
        if entity_format == EntityFormat.ANY:
            return
        self._entries[entity] = CacheEntry(
            format=entity_format,
            timestamp=self._clock(),
            ttl=self.ttl_seconds,
        )
    
    def clear(self) -> None:
        self._entries.clear()
    
    def __contains__(self, entity: str) -> bool:
        return entity in self._entries
    
    def __len__(self) -> int:
        return len(self._entries)
