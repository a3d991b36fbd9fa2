"""Cache of recent availability lookups.

Best Practices:
- Use TTL (time-to-live) so stale availability is never shown
- Bounded size: only the most recently written lookups are kept
- One cache per search controller (no process-wide state)
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from bank_booking import config
from bank_booking.api.models import TimeSlot

logger = logging.getLogger(__name__)


def make_cache_key(date: str, time_of_day: str) -> str:
    """Build the lookup key for a (date, time) search, e.g. '2025-08-28_10:00'."""
    return f"{date}_{time_of_day}"


@dataclass(frozen=True)
class CacheEntry:
    """Slots from one lookup and the instant they were written."""
    data: Tuple[TimeSlot, ...]
    timestamp: float


class AvailabilityCache:
    """
    Cache for availability lookups keyed by (date, time).

    Pattern: Key-value cache with TTL and a recency cap.

    Reads never refresh recency: eviction keeps the entries with the most
    recent write timestamps.
    """

    def __init__(
        self,
        ttl: float = config.CACHE_TTL_SECONDS,
        max_size: int = config.CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize availability cache.

        Args:
            ttl: Time-to-live in seconds (default: 5 minutes)
            max_size: Maximum number of entries kept (default: 10)
            clock: Source of the current time in seconds
        """
        self.cache: Dict[str, CacheEntry] = {}
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock

    def __len__(self) -> int:
        return len(self.cache)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _is_expired(self, entry: CacheEntry) -> bool:
        """Check if cache entry has expired."""
        return self._clock() - entry.timestamp >= self.ttl

    def get(self, key: str) -> Optional[Tuple[TimeSlot, ...]]:
        """
        Get cached slots for a lookup key.

        Args:
            key: Cache key from make_cache_key()

        Returns:
            Cached slots or None if not found/expired
        """
        entry = self.cache.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            del self.cache[key]
            logger.debug("Cache entry expired: %s", key)
            return None

        return entry.data

    def set(self, key: str, slots: Sequence[TimeSlot]):
        """
        Store slots for a lookup key, evicting the oldest writes past max_size.

        Args:
            key: Cache key from make_cache_key()
            slots: Slots returned by the availability lookup
        """
        # Re-inserting moves the key to the end so ties on timestamp keep write order
        self.cache.pop(key, None)
        self.cache[key] = CacheEntry(data=tuple(slots), timestamp=self._clock())

        if len(self.cache) > self.max_size:
            by_write_time = sorted(self.cache.items(), key=lambda item: item[1].timestamp)
            kept = dict(by_write_time[-self.max_size:])
            evicted = [k for k in self.cache if k not in kept]
            self.cache = kept
            logger.debug("Evicted %d cache entries: %s", len(evicted), evicted)
