"""
Rewardify Customer Engine — Policies
====================================
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


def customer_must_belong_to_vendor_policy(
    customer: Optional[dict],
    vendor_id,
    customer_id=None,
) -> Optional[RejectionReason]:
    if customer is None or customer.get("vendor_id") != str(vendor_id):
        return RejectionReason(
            code=ReasonCode.CUSTOMER_NOT_FOUND,
            message=f"Customer '{customer_id}' not found.",
            policy_name="customer_must_belong_to_vendor_policy",
        )
    return None


def phone_must_be_unique_policy(
    existing: Optional[dict],
    phone: str,
    customer_id=None,
) -> Optional[RejectionReason]:
    """existing: the vendor's customer already holding this phone, if any."""
    if existing is None:
        return None
    if customer_id is not None and existing["id"] == str(customer_id):
        return None
    return RejectionReason(
        code=ReasonCode.DUPLICATE_CUSTOMER,
        message=f"A customer with phone '{phone}' already exists.",
        policy_name="phone_must_be_unique_policy",
    )
