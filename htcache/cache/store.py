"""
Cache Store Module

This module implements the keyed collection of Records shared by the
HTTP handlers and the garbage collector.

- set(): Insert or replace a Record
- get(): Look up a live Record
- sweep(): Remove expired Records and compact the backing mapping
"""

import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..config.settings import settings
from .record import Record, utcnow


class CacheStore:
    """
    In-memory key/value store with TTL expiration.

    The store is keyed directly by the external key string, so two
    different keys can never alias each other. Every public operation runs
    under a single lock owned by the store: at most one caller, request
    handler or garbage collector, touches the mapping at a time.

    Expiration is checked in two places with the same predicate
    (Record.is_expired): lazily in get(), which never returns an expired
    Record, and eagerly in sweep(), which removes them.

    The capacity target is a sizing hint only. It never causes live
    entries to be evicted and places no bound on the number of entries;
    sweep() uses it to decide whether the mapping is worth rebuilding.

    Attributes:
        capacity_target: Soft sizing hint for post-sweep compaction
    """

    def __init__(
            self,
            capacity_target: int = None,
            clock: Callable[[], Any] = None,
    ):
        """
        Initialize the store.

        Args:
            capacity_target: Sizing hint (default from settings.CAPACITY)
            clock: Callable returning the current aware UTC datetime
        """
        self.capacity_target = (
            capacity_target if capacity_target is not None else settings.CAPACITY
        )
        if self.capacity_target < 0:
            raise ValueError("capacity_target must not be negative")

        self._clock = clock if clock is not None else utcnow
        self._lock = threading.Lock()
        self._entries: Dict[str, Record] = {}

        # Largest number of entries held since the mapping was last rebuilt
        self._high_water = 0

    def set(
            self,
            key: str,
            content: str,
            ttl: Optional[int] = None,
            content_type: Optional[str] = None,
    ) -> Record:
        """
        Create or replace the Record stored under a key.

        The previous Record, expired or not, is discarded unconditionally
        and the new one gets a fresh creation time.

        Args:
            key: The key to store
            content: The payload to cache
            ttl: Time-to-live in seconds (None = never expires)
            content_type: Content type to echo back on retrieval

        Returns:
            The newly stored Record

        Raises:
            ValueError: If ttl is negative, above settings.MAX_TTL, or
                        puts the expiry beyond the representable date range
        """
        if ttl is not None and ttl < 0:
            raise ValueError("ttl must not be negative")
        if ttl is not None and ttl > settings.MAX_TTL:
            raise ValueError(f"ttl must not exceed {settings.MAX_TTL}")

        with self._lock:
            record = Record(
                content=content,
                created=self._clock(),
                ttl=ttl,
                content_type=content_type,
            )
            # Every stored Record must be able to answer is_expired()
            try:
                record.expires_at
            except OverflowError:
                raise ValueError("ttl puts expiry out of range")
            self._entries[key] = record
            if len(self._entries) > self._high_water:
                self._high_water = len(self._entries)
        return record

    def now(self) -> datetime:
        """Current time according to the store's clock."""
        return self._clock()

    def get(self, key: str) -> Optional[Record]:
        """
        Retrieve the live Record for a key.

        Args:
            key: The key to look up

        Returns:
            The Record if present and not expired, None otherwise.
            Expired Records are left in place for sweep() to reclaim.
        """
        with self._lock:
            record = self._entries.get(key)
            if record is None or record.is_expired(self._clock()):
                return None
            return record

    def sweep(self) -> int:
        """
        Remove every expired Record (active expiration).

        Expiration is evaluated once per Record against a single
        sweep-time "now". Afterwards the backing mapping is rebuilt when it
        has grown past the capacity target, which releases the memory a
        dict keeps after deletions.

        Returns:
            Number of Records removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, record in self._entries.items() if record.is_expired(now)]
            for key in expired:
                del self._entries[key]

            if expired and self._high_water > self.capacity_target:
                self._entries = dict(self._entries)
                self._high_water = len(self._entries)

            return len(expired)

    def size(self) -> int:
        """
        Get the current number of Records in the store.

        Note: This includes expired Records that haven't been swept yet.
        """
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        """Raw presence check, regardless of expiration."""
        with self._lock:
            return key in self._entries

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Records currently held
            - expired_keys: Expired Records not yet swept
            - active_keys: Live Records
            - capacity_target: The sizing hint
            - high_water: Peak size since the last compaction
        """
        with self._lock:
            now = self._clock()
            total = len(self._entries)
            expired = sum(1 for record in self._entries.values() if record.is_expired(now))
            return {
                "total_keys": total,
                "expired_keys": expired,
                "active_keys": total - expired,
                "capacity_target": self.capacity_target,
                "high_water": self._high_water,
            }
