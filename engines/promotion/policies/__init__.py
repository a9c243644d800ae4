"""
Rewardify Promotion Engine — Policies
=====================================
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


def promotion_must_belong_to_vendor_policy(
    promotion: Optional[dict],
    vendor_id,
    promotion_id=None,
) -> Optional[RejectionReason]:
    if promotion is None or promotion.get("vendor_id") != str(vendor_id):
        return RejectionReason(
            code=ReasonCode.PROMOTION_NOT_FOUND,
            message=f"Promotion '{promotion_id}' not found.",
            policy_name="promotion_must_belong_to_vendor_policy",
        )
    return None
