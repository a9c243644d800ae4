"""
Rewardify Transaction Engine — Policies
=======================================
Vendor scoping guards for transaction reads and writes.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


def transaction_must_belong_to_vendor_policy(
    transaction: Optional[dict],
    vendor_id,
    transaction_id=None,
) -> Optional[RejectionReason]:
    """Unknown and foreign transactions are indistinguishable to the caller."""
    if transaction is None or transaction.get("vendor_id") != str(vendor_id):
        return RejectionReason(
            code=ReasonCode.TRANSACTION_NOT_FOUND,
            message=f"Transaction '{transaction_id}' not found.",
            policy_name="transaction_must_belong_to_vendor_policy",
        )
    return None


def reference_must_be_well_formed_policy(
    short_id: Optional[str],
    reference_number: str,
) -> Optional[RejectionReason]:
    if not short_id:
        return RejectionReason(
            code=ReasonCode.INVALID_REFERENCE,
            message=f"Invalid reference number format: '{reference_number}'.",
            policy_name="reference_must_be_well_formed_policy",
        )
    return None
