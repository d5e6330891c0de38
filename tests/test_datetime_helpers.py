"""Tests for datetime helper utilities."""
from datetime import UTC, datetime, timedelta, timezone

from alumni_tracer.utils.datetime_helpers import ensure_utc, utc_now


def test_ensure_utc_none_returns_none():
    assert ensure_utc(None) is None


def test_naive_datetime_is_marked_utc():
    """SQLite hands back naive datetimes; the wall clock must not shift."""
    naive = datetime(2025, 6, 30, 23, 45)

    result = ensure_utc(naive)

    assert result.tzinfo is UTC
    assert result.replace(tzinfo=None) == naive


def test_aware_datetime_is_converted():
    manila = timezone(timedelta(hours=8))

    result = ensure_utc(datetime(2025, 7, 1, 7, 45, tzinfo=manila))

    assert result == datetime(2025, 6, 30, 23, 45, tzinfo=UTC)
    assert result.tzinfo is UTC


def test_utc_now_is_aware():
    assert utc_now().tzinfo is UTC
