"""
Rewardify Rewards Engine — Customer Reward Ledger
=================================================
Customer.rewards is a JSON mapping of vendor id → list of reward
entries. Entries are only ever appended; a vendor's bucket written by
older releases may be a single entry object instead of a list and is
normalized before use.

Entry shape (JSON-safe, timestamps ISO-8601):
    {type, amount, metadata, transactionId, expiresAt, lastUpdated}
"""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any, Optional

from core.time import to_iso


def vendor_key(vendor_id: Any) -> str:
    return str(vendor_id)


def normalize_bucket(bucket: Any) -> list[dict]:
    """Return the vendor's entries as a list (legacy object → one element)."""
    if bucket is None:
        return []
    if isinstance(bucket, list):
        return list(bucket)
    if isinstance(bucket, dict):
        return [bucket]
    raise ValueError(f"Unrecognised reward bucket shape: {type(bucket).__name__}")


def build_entry(
    *,
    reward_type: str,
    amount: float,
    metadata: Optional[dict],
    transaction_id: Optional[str],
    expires_at: Optional[datetime],
    now: datetime,
) -> dict:
    return {
        "type": reward_type,
        "amount": amount,
        "metadata": dict(metadata or {}),
        "transactionId": str(transaction_id) if transaction_id is not None else None,
        "expiresAt": to_iso(expires_at),
        "lastUpdated": to_iso(now),
    }


def append_entry(rewards: Optional[dict], vendor_id: Any, entry: dict) -> dict:
    """
    Return a new ledger with entry appended to the vendor's bucket.

    The input mapping is not mutated; other vendors' buckets are
    carried over untouched.
    """
    ledger = copy.deepcopy(rewards) if rewards else {}
    if not isinstance(ledger, dict):
        raise ValueError("Customer rewards must be a JSON object.")
    key = vendor_key(vendor_id)
    bucket = normalize_bucket(ledger.get(key))
    bucket.append(entry)
    ledger[key] = bucket
    return ledger


def vendor_entries(rewards: Optional[dict], vendor_id: Any) -> list[dict]:
    if not rewards:
        return []
    return normalize_bucket(rewards.get(vendor_key(vendor_id)))
