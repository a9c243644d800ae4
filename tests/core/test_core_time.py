"""
Tests for core.time — Clock protocol and temporal helpers.
"""

import pytest
from datetime import date, datetime, timezone, timedelta

from core.time.clock import (
    FixedClock,
    SystemClock,
    set_default_clock,
    get_default_clock,
    now_utc,
)
from core.time.temporal import (
    add_days,
    is_expired,
    iter_days,
    month_bounds,
    parse_timestamp,
    to_iso,
)


# ── Clock Tests ──────────────────────────────────────────────

class TestSystemClock:
    def test_returns_utc_datetime(self):
        clock = SystemClock()
        dt = clock.now_utc()
        assert dt.tzinfo is not None
        assert dt.tzinfo == timezone.utc

    def test_time_advances(self):
        clock = SystemClock()
        t1 = clock.now_utc()
        t2 = clock.now_utc()
        assert t2 >= t1


class TestFixedClock:
    def test_returns_fixed_time(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        assert clock.now_utc() == fixed
        assert clock.now_utc() == fixed  # Same every time

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2025, 1, 1))

    def test_advance(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        clock.advance(seconds=60)
        assert clock.now_utc() == fixed + timedelta(seconds=60)
        clock.advance(days=2)
        assert clock.now_utc() == fixed + timedelta(days=2, seconds=60)


class TestDefaultClock:
    def test_set_and_get_default(self):
        original = get_default_clock()
        fixed = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        set_default_clock(fixed)
        try:
            assert now_utc() == datetime(2025, 1, 1, tzinfo=timezone.utc)
        finally:
            set_default_clock(original)


# ── Temporal Helper Tests ────────────────────────────────────

class TestAddDays:
    def test_adds_days(self):
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert add_days(start, 365) == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_none_days_means_no_deadline(self):
        assert add_days(datetime(2025, 1, 1, tzinfo=timezone.utc), None) is None


class TestIsExpired:
    def test_not_expired(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert not is_expired(now + timedelta(seconds=1), now)

    def test_expired_at_boundary(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert is_expired(now, now)

    def test_no_expiry_never_expires(self):
        assert not is_expired(None, datetime(2099, 1, 1, tzinfo=timezone.utc))


class TestTimestamps:
    def test_parse_z_suffix(self):
        parsed = parse_timestamp("2025-03-01T10:00:00Z")
        assert parsed == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_parse_roundtrips_iso(self):
        moment = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert parse_timestamp(to_iso(moment)) == moment

    def test_parse_passes_datetimes_and_blanks(self):
        moment = datetime(2025, 3, 1, tzinfo=timezone.utc)
        assert parse_timestamp(moment) is moment
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_to_iso_none(self):
        assert to_iso(None) is None


class TestCalendar:
    def test_month_bounds(self):
        assert month_bounds(datetime(2024, 2, 10, tzinfo=timezone.utc)) == (
            date(2024, 2, 1), date(2024, 2, 29),
        )

    def test_month_bounds_december(self):
        assert month_bounds(datetime(2025, 12, 31, tzinfo=timezone.utc)) == (
            date(2025, 12, 1), date(2025, 12, 31),
        )

    def test_iter_days_inclusive(self):
        days = list(iter_days(date(2025, 1, 30), date(2025, 2, 2)))
        assert days == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]
