"""
Rewardify Core Time — Temporal Helpers
======================================
Pure functions for day-based validity windows.
All functions take explicit datetime arguments — no hidden clock access.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Optional


def add_days(start: datetime, days: Optional[int]) -> Optional[datetime]:
    """Return start + days, or None when no day count is configured."""
    if days is None:
        return None
    return start + timedelta(days=days)


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """An absent expiry never expires."""
    if expires_at is None:
        return False
    return expires_at <= now


def parse_timestamp(value) -> Optional[datetime]:
    """Accept a datetime or an ISO-8601 string (as stored in JSON blobs)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def month_bounds(moment: datetime) -> tuple[date, date]:
    """First and last calendar day of the month containing moment."""
    first = moment.date().replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return first, next_first - timedelta(days=1)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
