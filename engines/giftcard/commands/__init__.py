"""
Rewardify Gift Card Engine — Commands
=====================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class GiftCardRequest:
    """Issue a gift card, or replace an issued card's terms."""
    amount: float
    description: str
    validity_days: int
    terms: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)) or self.amount <= 0:
            raise ValueError("amount must be a positive number.")
        if not isinstance(self.description, str):
            raise ValueError("description must be a string.")
        if (
            isinstance(self.validity_days, bool)
            or not isinstance(self.validity_days, int)
            or self.validity_days < 1
        ):
            raise ValueError("validity_days must be an integer >= 1.")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "GiftCardRequest":
        return cls(
            amount=payload.get("amount"),
            description=payload.get("description") or "",
            validity_days=payload.get("validityDays", payload.get("validity_days")),
            terms=payload.get("terms") or None,
        )
