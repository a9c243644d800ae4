"""
Rewardify Core Time — Public API
================================
Explicit clock protocol and temporal helpers.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    set_default_clock,
)
from core.time.temporal import (
    add_days,
    is_expired,
    iter_days,
    month_bounds,
    parse_timestamp,
    to_iso,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "add_days",
    "is_expired",
    "iter_days",
    "month_bounds",
    "parse_timestamp",
    "to_iso",
]
