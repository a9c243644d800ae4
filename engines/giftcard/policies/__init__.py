"""
Rewardify Gift Card Engine — Policies
=====================================
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


def gift_card_must_belong_to_vendor_policy(
    card: Optional[dict],
    vendor_id,
    gift_card_id=None,
) -> Optional[RejectionReason]:
    if card is None or card.get("vendor_id") != str(vendor_id):
        return RejectionReason(
            code=ReasonCode.GIFT_CARD_NOT_FOUND,
            message=f"Gift card '{gift_card_id}' not found.",
            policy_name="gift_card_must_belong_to_vendor_policy",
        )
    return None
