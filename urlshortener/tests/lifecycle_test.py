from datetime import datetime

import pytest
from freezegun import freeze_time

from urlshortener.db.Models.models import URLItem
from urlshortener.services.lifecycle import (
    LifecycleManager,
    TouchResult,
    compute_expiry,
    is_expired,
    touch_on_read,
)
from urlshortener.utils.timeutils import format_timestamp, utcnow


def make_record(expires_at):
    return URLItem(
        original_url="https://example.com",
        short_code="abc",
        created_at=datetime(2025, 1, 1),
        updated_at=datetime(2025, 1, 1),
        expires_at=expires_at,
        access_count=0,
    )


def test_default_retention_is_six_months():
    assert compute_expiry(datetime(2025, 1, 15, 9, 30)) == datetime(2025, 7, 15, 9, 30)


def test_retention_clamps_to_month_end():
    assert compute_expiry(datetime(2025, 8, 31)) == datetime(2026, 2, 28)


def test_expiry_is_after_creation():
    manager = LifecycleManager(retention_months=1)
    created = datetime(2025, 3, 10)
    assert manager.compute_expiry(created) > created


def test_retention_must_be_positive():
    with pytest.raises(ValueError):
        LifecycleManager(retention_months=0)


def test_is_expired_is_strict():
    record = make_record(datetime(2025, 7, 1))
    assert not is_expired(record, datetime(2025, 6, 30, 23, 59, 59))
    assert not is_expired(record, datetime(2025, 7, 1))
    assert is_expired(record, datetime(2025, 7, 1, 0, 0, 1))


def test_record_without_expiry_never_expires():
    record = make_record(None)
    assert not is_expired(record, datetime(2999, 1, 1))
    assert LifecycleManager().seconds_left(record, datetime(2025, 1, 1)) is None


def test_touch_on_read():
    record = make_record(datetime(2025, 7, 1))
    assert touch_on_read(record, datetime(2025, 6, 1)) is TouchResult.KEEP
    assert touch_on_read(record, datetime(2025, 8, 1)) is TouchResult.EXPIRED
    assert record.access_count == 0


def test_seconds_left():
    manager = LifecycleManager()
    record = make_record(datetime(2025, 1, 1, 0, 1, 30))
    assert manager.seconds_left(record, datetime(2025, 1, 1)) == 90
    assert manager.seconds_left(record, datetime(2025, 2, 1)) == 0


@freeze_time("2025-04-05 06:07:08")
def test_utcnow_is_naive_utc():
    now = utcnow()
    assert now == datetime(2025, 4, 5, 6, 7, 8)
    assert now.tzinfo is None


def test_format_timestamp():
    assert format_timestamp(datetime(2025, 4, 5, 6, 7, 8)) == "2025-04-05T06:07:08Z"
    assert format_timestamp(datetime(2025, 4, 5, 6, 7, 8, 120000)) == "2025-04-05T06:07:08.120000Z"
    assert format_timestamp(None) is None
