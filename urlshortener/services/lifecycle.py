"""Expiration rules for short URLs.

Expiry is enforced lazily: every read or write that touches a record checks
it here first. The optional sweeper and any store-side TTL are secondary.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

from urlshortener.db.Models.models import URLItem

DEFAULT_RETENTION = relativedelta(months=6)


class TouchResult(Enum):
    KEEP = "keep"
    EXPIRED = "expired"


def compute_expiry(created_at: datetime, retention: relativedelta = DEFAULT_RETENTION) -> datetime:
    return created_at + retention


def is_expired(record: URLItem, now: datetime) -> bool:
    return record.expires_at is not None and now > record.expires_at


def touch_on_read(record: URLItem, now: datetime) -> TouchResult:
    """EXPIRED tells the caller to delete the record and report not-found."""
    if is_expired(record, now):
        return TouchResult.EXPIRED
    return TouchResult.KEEP


class LifecycleManager:
    def __init__(self, retention_months: int = 6):
        if retention_months < 1:
            raise ValueError(f"retention_months must be positive (given: {retention_months})")
        self.retention = relativedelta(months=retention_months)

    def compute_expiry(self, created_at: datetime) -> datetime:
        return compute_expiry(created_at, self.retention)

    def is_expired(self, record: URLItem, now: datetime) -> bool:
        return is_expired(record, now)

    def touch_on_read(self, record: URLItem, now: datetime) -> TouchResult:
        return touch_on_read(record, now)

    def seconds_left(self, record: URLItem, now: datetime) -> Optional[int]:
        """Whole seconds until expiry, or None when the record never expires."""
        if record.expires_at is None:
            return None
        return max(0, int((record.expires_at - now).total_seconds()))
