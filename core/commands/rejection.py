"""
Rewardify Command Layer — Rejection Model
=========================================
Structured reasons for refused requests.

A rejection is not an exception: services return it so the caller
(HTTP adapter, tests) can report it without unwinding the request.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for request rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'TRANSACTION_NOT_FOUND').
        message:     Human-readable explanation.
        policy_name: Name of the guard that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Vendor scope ──────────────────────────────────────────
    UNAUTHORIZED = "UNAUTHORIZED"

    # ── Records ───────────────────────────────────────────────
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    GIFT_CARD_NOT_FOUND = "GIFT_CARD_NOT_FOUND"
    PROMOTION_NOT_FOUND = "PROMOTION_NOT_FOUND"

    # ── Domain ────────────────────────────────────────────────
    DUPLICATE_CUSTOMER = "DUPLICATE_CUSTOMER"
    INVALID_REFERENCE = "INVALID_REFERENCE"


# Codes that transports report as "not found" rather than "bad request".
NOT_FOUND_CODES = frozenset({
    ReasonCode.TRANSACTION_NOT_FOUND,
    ReasonCode.CUSTOMER_NOT_FOUND,
    ReasonCode.GIFT_CARD_NOT_FOUND,
    ReasonCode.PROMOTION_NOT_FOUND,
})

