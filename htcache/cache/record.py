"""
Cache Record Module

A Record is a single cached value together with its creation time,
optional time-to-live and optional content type.

Records never change after creation. Storing a key again replaces its
Record wholesale, which resets the creation time and the TTL.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Record:
    """
    An immutable cached value with expiration metadata.

    Attributes:
        content: The cached payload
        created: Aware UTC timestamp of insertion
        ttl: Time-to-live in seconds (None = never expires)
        content_type: Content type echoed back on retrieval, if any
    """

    content: str
    created: datetime
    ttl: Optional[int] = None
    content_type: Optional[str] = None

    @property
    def expires_at(self) -> Optional[datetime]:
        """Moment from which the record is expired, None if it never expires."""
        if self.ttl is None:
            return None
        return self.created + timedelta(seconds=self.ttl)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether the record has expired.

        A record with a TTL is expired at and after ``created + ttl``.
        A record without a TTL is never expired.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            True if expired, False otherwise
        """
        expires_at = self.expires_at
        if expires_at is None:
            return False
        if now is None:
            now = utcnow()
        return now >= expires_at

    def value(self, now: Optional[datetime] = None) -> Optional[str]:
        """Return the content, or None once the record has expired."""
        if self.is_expired(now):
            return None
        return self.content

    def age(self, now: Optional[datetime] = None) -> int:
        """Whole seconds elapsed since the record was created."""
        if now is None:
            now = utcnow()
        return max(0, int((now - self.created).total_seconds()))
