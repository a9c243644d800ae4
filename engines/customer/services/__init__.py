"""
Rewardify Customer Engine — Service Layer
=========================================
Customer CRUD for a vendor, plus read-side views over the reward
ledger kept on each customer.

The ledger itself is append-only and owned by engines/rewards; this
service only reads it.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.time import Clock, SystemClock, is_expired, parse_timestamp
from engines.customer.commands import CustomerProfileRequest
from engines.customer.policies import (
    customer_must_belong_to_vendor_policy,
    phone_must_be_unique_policy,
)
from engines.rewards.ledger import vendor_entries

logger = logging.getLogger("rewardify.customers")


def reward_history(customer: dict, vendor_id) -> list[dict]:
    """The vendor's ledger bucket for this customer, oldest first."""
    return vendor_entries(customer.get("rewards"), vendor_id)


def available_rewards(customer: dict, vendor_id, now) -> dict[str, float]:
    """Sum of unexpired entry amounts per reward type."""
    totals: dict[str, float] = {}
    for entry in reward_history(customer, vendor_id):
        if is_expired(parse_timestamp(entry.get("expiresAt")), now):
            continue
        reward_type = entry.get("type", "UNKNOWN")
        totals[reward_type] = totals.get(reward_type, 0) + (entry.get("amount") or 0)
    return totals


class CustomerService:
    def __init__(self, *, store, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or SystemClock()

    def _lookup(self, vendor_id, customer_id):
        customer = self._store.get_customer(customer_id)
        rejection = customer_must_belong_to_vendor_policy(customer, vendor_id, customer_id)
        return (None, rejection) if rejection else (customer, None)

    def create_customer(self, vendor_id, request: CustomerProfileRequest) -> dict:
        existing = self._store.find_customer_by_phone(vendor_id, request.phone)
        rejection = phone_must_be_unique_policy(existing, request.phone)
        if rejection:
            return {"rejected": rejection}
        customer = self._store.create_customer(
            vendor_id, {**request.to_record(), "rewards": {}, "is_active": True},
        )
        logger.info("Created customer %s for vendor %s", customer["id"], vendor_id)
        return {"customer": customer}

    def update_customer(self, vendor_id, customer_id, request: CustomerProfileRequest) -> dict:
        with self._store.atomic():
            _, rejection = self._lookup(vendor_id, customer_id)
            if rejection:
                return {"rejected": rejection}
            existing = self._store.find_customer_by_phone(vendor_id, request.phone)
            rejection = phone_must_be_unique_policy(existing, request.phone, customer_id)
            if rejection:
                return {"rejected": rejection}
            customer = self._store.update_customer(customer_id, request.to_record())
        return {"customer": customer}

    def delete_customer(self, vendor_id, customer_id) -> dict:
        with self._store.atomic():
            _, rejection = self._lookup(vendor_id, customer_id)
            if rejection:
                return {"rejected": rejection}
            self._store.delete_customer(customer_id)
        logger.info("Deleted customer %s for vendor %s", customer_id, vendor_id)
        return {"deleted": str(customer_id)}

    def list_customers(self, vendor_id) -> list[dict]:
        return self._store.list_customers(vendor_id)

    def get_customer(self, vendor_id, customer_id) -> dict:
        customer, rejection = self._lookup(vendor_id, customer_id)
        if rejection:
            return {"rejected": rejection}
        return {"customer": customer}

    def get_rewards(self, vendor_id, customer_id) -> dict:
        customer, rejection = self._lookup(vendor_id, customer_id)
        if rejection:
            return {"rejected": rejection}
        return {
            "customer_id": customer["id"],
            "history": reward_history(customer, vendor_id),
            "available": available_rewards(customer, vendor_id, self._clock.now_utc()),
        }
