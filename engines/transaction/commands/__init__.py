"""
Rewardify Transaction Engine — Commands
=======================================
A recorded sale: customer phone, payment type, line items and an
order-level discount. The payable amount is never accepted from the
client; it is always derived from the items.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

VALID_TRANSACTION_TYPES = frozenset({"CASH", "UPI", "CREDIT", "DEBIT", "OTHER"})
DIGITAL_TRANSACTION_TYPES = frozenset({"UPI", "CREDIT", "DEBIT", "OTHER"})


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


@dataclass(frozen=True)
class TransactionItemInput:
    name: str
    quantity: int
    price: float
    tax_rate: float = 0
    category: Optional[str] = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("item name must be a non-empty string.")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("item quantity must be an integer >= 1.")
        if not _is_number(self.price) or self.price < 0:
            raise ValueError("item price must be a number >= 0.")
        if not _is_number(self.tax_rate) or not 0 <= self.tax_rate <= 100:
            raise ValueError("item tax_rate must be between 0 and 100.")

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    @property
    def tax(self) -> float:
        return self.subtotal * self.tax_rate / 100

    def to_record(self) -> dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "tax_rate": self.tax_rate,
            "total_amount": self.subtotal,
            "category": self.category,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "TransactionItemInput":
        if not isinstance(payload, dict):
            raise ValueError("items must be objects.")
        return cls(
            name=payload["name"],
            quantity=payload["quantity"],
            price=payload["price"],
            tax_rate=payload.get("taxRate", payload.get("tax_rate", 0)) or 0,
            category=payload.get("category"),
        )


@dataclass(frozen=True)
class RecordTransactionRequest:
    """Create a transaction, or replace one wholesale on update."""
    phone: str
    transaction_type: str
    items: Tuple[TransactionItemInput, ...]
    discount_percentage: float = 0
    description: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self):
        if not self.phone or not isinstance(self.phone, str):
            raise ValueError("phone must be a non-empty string.")
        if self.transaction_type not in VALID_TRANSACTION_TYPES:
            raise ValueError(f"Invalid transaction type: {self.transaction_type}")
        if not isinstance(self.items, tuple) or not self.items:
            raise ValueError("items must be a non-empty tuple.")
        for item in self.items:
            if not isinstance(item, TransactionItemInput):
                raise ValueError("items must be TransactionItemInput.")
        if not _is_number(self.discount_percentage) or not 0 <= self.discount_percentage <= 100:
            raise ValueError("discount_percentage must be between 0 and 100.")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RecordTransactionRequest":
        raw_items = payload.get("items") or []
        if not isinstance(raw_items, list):
            raise ValueError("items must be a list.")
        return cls(
            phone=payload["phone"],
            transaction_type=payload["type"],
            items=tuple(TransactionItemInput.from_payload(item) for item in raw_items),
            discount_percentage=payload.get("discountPercentage", payload.get("discount_percentage", 0)) or 0,
            description=payload.get("description"),
            category=payload.get("category"),
        )
