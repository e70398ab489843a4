"""
Time Utility Functions

All timestamps are persisted as naive UTC datetimes.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC now (the store's default clock)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime for storage.

    Aware datetimes are converted to UTC; naive ones are taken as UTC already.
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """
    Expiry is exclusive: an account is valid only while expires_at > now.

    Args:
        expires_at: Expiration date (None = never expires)
        now: Reference time (naive UTC)

    Returns:
        True if expired
    """
    if expires_at is None:
        return False
    return not to_storage(expires_at) > now


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) - timedelta(days=days)
