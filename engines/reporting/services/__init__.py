"""
Rewardify Reporting Engine — Application Service
================================================
Read-side aggregates for the vendor dashboard overview.

This engine is READ ONLY:
- Aggregates are computed from stored transactions and promotions
- Nothing is cached or persisted
- Multi-tenant: every query is keyed by vendor_id
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Optional

from core.time import Clock, SystemClock, iter_days, month_bounds, parse_timestamp
from engines.transaction.commands import DIGITAL_TRANSACTION_TYPES

PAYMENT_TYPE_ORDER = ("CASH", "UPI", "CREDIT", "DEBIT", "OTHER")
PROMOTION_ACTIVITY_MONTHS = 6


# ══════════════════════════════════════════════════════════════
# AGGREGATES (pure)
# ══════════════════════════════════════════════════════════════

def _day_of(value) -> date:
    return parse_timestamp(value).date()


def daily_payment_split(transactions: Iterable[dict], start: date, end: date) -> list[dict]:
    """One {date, cash, digital} row per calendar day in [start, end]."""
    rows = {day: {"date": day.isoformat(), "cash": 0, "digital": 0} for day in iter_days(start, end)}
    for tx in transactions:
        row = rows.get(_day_of(tx["created_at"]))
        if row is None:
            continue
        if tx["type"] == "CASH":
            row["cash"] += tx["amount"] or 0
        elif tx["type"] in DIGITAL_TRANSACTION_TYPES:
            row["digital"] += tx["amount"] or 0
    return list(rows.values())


def payment_type_totals(transactions: Iterable[dict]) -> list[dict]:
    """Amount per payment type; types with no takings are left out."""
    sums = {payment_type: 0 for payment_type in PAYMENT_TYPE_ORDER}
    for tx in transactions:
        if tx["type"] in sums:
            sums[tx["type"]] += tx["amount"] or 0
    return [
        {"type": payment_type, "amount": amount}
        for payment_type, amount in sums.items()
        if amount > 0
    ]


def monthly_promotion_activity(promotions: Iterable[dict], start: date, end: date) -> list[dict]:
    """
    Active promotion count and redemptions per month of start date.

    Promotions without a start date, or starting outside [start, end],
    are not counted. Months appear in chronological order.
    """
    dated = []
    for promotion in promotions:
        started = parse_timestamp(promotion.get("start_date"))
        if started is None or not start <= started.date() <= end:
            continue
        dated.append((started, promotion))
    dated.sort(key=lambda pair: pair[0])

    months: dict[tuple[int, int], dict] = {}
    for started, promotion in dated:
        key = (started.year, started.month)
        bucket = months.get(key)
        if bucket is None:
            bucket = months[key] = {
                "month": started.strftime("%B"),
                "year": started.year,
                "activePromotions": 0,
                "redemptions": 0,
            }
        if promotion.get("is_active"):
            bucket["activePromotions"] += 1
        bucket["redemptions"] += promotion.get("current_redemptions") or 0
    return list(months.values())


def months_back(moment: datetime, count: int) -> date:
    """First day of the month count months before moment's month."""
    year, month = moment.year, moment.month - count
    while month < 1:
        month += 12
        year -= 1
    return date(year, month, 1)


# ══════════════════════════════════════════════════════════════
# SERVICE
# ══════════════════════════════════════════════════════════════

class ReportingService:
    def __init__(self, *, store, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or SystemClock()

    def _month_transactions(self, vendor_id, now: datetime) -> tuple[list[dict], date, date]:
        first, last = month_bounds(now)
        since = datetime.combine(first, time.min, tzinfo=now.tzinfo)
        until = datetime.combine(last, time.max, tzinfo=now.tzinfo)
        return self._store.list_transactions(vendor_id, since=since, until=until), first, last

    def overview(self, vendor_id) -> dict:
        now = self._clock.now_utc()
        transactions, first, last = self._month_transactions(vendor_id, now)
        activity_start = months_back(now, PROMOTION_ACTIVITY_MONTHS - 1)
        return {
            "daily_payments": daily_payment_split(transactions, first, last),
            "payment_types": payment_type_totals(transactions),
            "promotion_activity": monthly_promotion_activity(
                self._store.list_promotions(vendor_id), activity_start, last,
            ),
            "month_total": sum(tx["amount"] or 0 for tx in transactions),
            "transaction_count": len(transactions),
        }
