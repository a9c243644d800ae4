"""
Rewardify Customer Engine — Commands
====================================
Vendor-scoped customer profiles. A customer is identified within a
vendor by phone number; the reward ledger is never written here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

VALID_GENDERS = frozenset({"MALE", "FEMALE", "OTHER", "NA"})


def _optional_text(value: Any) -> Optional[str]:
    # Form fields arrive as "" when left blank
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError("text fields must be strings.")
    return value


@dataclass(frozen=True)
class CustomerProfileRequest:
    """Create a customer, or overwrite an existing customer's profile."""
    phone: str
    name: Optional[str] = None
    email: Optional[str] = None
    gender: str = "NA"
    tax_number: Optional[str] = None

    def __post_init__(self):
        if not self.phone or not isinstance(self.phone, str):
            raise ValueError("phone must be a non-empty string.")
        if self.gender not in VALID_GENDERS:
            raise ValueError(f"Invalid gender: {self.gender}")
        if self.email is not None and "@" not in self.email:
            raise ValueError("email must be a valid address.")

    def to_record(self) -> dict:
        return {
            "phone": self.phone,
            "name": self.name,
            "email": self.email,
            "gender": self.gender,
            "tax_number": self.tax_number,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CustomerProfileRequest":
        return cls(
            phone=payload.get("phone"),
            name=_optional_text(payload.get("name")),
            email=_optional_text(payload.get("email")),
            gender=payload.get("gender") or "NA",
            tax_number=_optional_text(payload.get("taxNumber", payload.get("tax_number"))),
        )
