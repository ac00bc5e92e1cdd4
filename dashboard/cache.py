"""
Section Content Cache.

Holds fetched markup per section with the time it was captured. Entries for
volatile sections (live counters, charts) expire quickly; everything else
lives for the default TTL. There is no size bound: the set of sections is
fixed and small.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from dashboard.clock import Clock
from dashboard.logging_config import logger


DEFAULT_TTL_MS = 300_000
VOLATILE_TTL_MS = 60_000
VOLATILE_SECTIONS = frozenset({"dashboard", "analytics"})


@dataclass(frozen=True)
class CacheEntry:
    markup: str
    captured_at: int  # epoch milliseconds


class SectionCache:
    """Per-section markup cache with class-based TTL"""

    def __init__(
        self,
        clock: Clock,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        volatile_ttl_ms: int = VOLATILE_TTL_MS,
        volatile_sections: Iterable[str] = VOLATILE_SECTIONS,
    ):
        self._clock = clock
        self.default_ttl_ms = default_ttl_ms
        self.volatile_ttl_ms = volatile_ttl_ms
        self.volatile_sections = frozenset(volatile_sections)
        self._entries: Dict[str, CacheEntry] = {}

    def ttl(self, section: str) -> int:
        if section in self.volatile_sections:
            return self.volatile_ttl_ms
        return self.default_ttl_ms

    def get(self, section: str) -> Optional[str]:
        """Stored markup regardless of age, or None"""
        entry = self._entries.get(section)
        return entry.markup if entry else None

    def entry(self, section: str) -> Optional[CacheEntry]:
        return self._entries.get(section)

    def put(self, section: str, markup: str) -> CacheEntry:
        entry = CacheEntry(markup=markup, captured_at=self._clock.now_ms())
        self._entries[section] = entry
        logger.log_cache_event(section, "store", size=len(markup))
        return entry

    def is_valid(self, section: str) -> bool:
        entry = self._entries.get(section)
        if entry is None:
            return False
        age = self._clock.now_ms() - entry.captured_at
        return age < self.ttl(section)

    def get_valid(self, section: str) -> Optional[str]:
        """Markup only when the entry is still within its TTL"""
        if self.is_valid(section):
            logger.log_cache_event(section, "hit")
            return self._entries[section].markup
        logger.log_cache_event(section, "miss")
        return None

    def invalidate(self, section: Optional[str] = None) -> None:
        """Drop one section, or every section when called without an argument"""
        if section is None:
            # Markup and timestamp live in one entry, so a single rebind clears both
            self._entries = {}
            logger.log_cache_event("*", "invalidate")
        else:
            self._entries.pop(section, None)
            logger.log_cache_event(section, "invalidate")

    def __contains__(self, section: str) -> bool:
        return section in self._entries

    def __len__(self) -> int:
        return len(self._entries)
