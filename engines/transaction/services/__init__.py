"""
Rewardify Transaction Engine — Service Layer
============================================
Records sales against a vendor's customers and applies the vendor's
reward policy to each new sale.

Transaction write, reward stamp and ledger append happen inside one
store.atomic() unit, so a failure anywhere rolls back all three.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol

from core.commands.rejection import RejectionReason
from core.time import Clock, SystemClock
from engines.rewards.services import RewardService
from engines.transaction.commands import RecordTransactionRequest, TransactionItemInput
from engines.transaction.invoice import invoice_rows
from engines.transaction.policies import transaction_must_belong_to_vendor_policy

logger = logging.getLogger("rewardify.transactions")


# ── Totals ────────────────────────────────────────────────────

@dataclass(frozen=True)
class TransactionTotals:
    subtotal: float
    discount: float
    tax: float
    amount: float

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "tax": self.tax,
            "amount": self.amount,
        }


def compute_totals(
    items: Iterable[TransactionItemInput],
    discount_percentage: float,
) -> TransactionTotals:
    """amount = subtotal − subtotal × discount% + Σ line tax."""
    items = tuple(items)
    subtotal = sum(item.subtotal for item in items)
    discount = subtotal * discount_percentage / 100
    tax = sum(item.tax for item in items)
    return TransactionTotals(
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        amount=subtotal - discount + tax,
    )


def totals_for_record(transaction: dict) -> TransactionTotals:
    """Recompute totals from a stored transaction's items."""
    items = [
        TransactionItemInput(
            name=item["name"],
            quantity=item["quantity"],
            price=item["price"],
            tax_rate=item.get("tax_rate") or 0,
        )
        for item in transaction.get("items", [])
    ]
    return compute_totals(items, transaction.get("discount_percentage") or 0)


def json_safe(value: Any) -> Any:
    """Snapshot helper: datetimes and UUIDs become strings."""
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


# ── Persistence Collaborator ──────────────────────────────────

class TransactionStore(Protocol):
    def atomic(self): ...

    def find_customer_by_phone(self, vendor_id, phone: str) -> Optional[dict]: ...

    def create_customer(self, vendor_id, data: dict) -> dict: ...

    def get_customer(self, customer_id) -> Optional[dict]: ...

    def create_transaction(self, vendor_id, data: dict, items: list[dict]) -> dict: ...

    def get_transaction(self, transaction_id) -> Optional[dict]: ...

    def list_transactions(self, vendor_id, *, since=None, until=None) -> list[dict]: ...

    def update_transaction(self, transaction_id, data: dict, items: list[dict]) -> dict: ...

    def delete_transaction(self, transaction_id) -> None: ...

    def record_transaction_audit(self, transaction_id, vendor_id, original_values: dict) -> dict: ...


# ── Service ───────────────────────────────────────────────────

class TransactionService:
    def __init__(
        self,
        *,
        store: TransactionStore,
        reward_service: RewardService,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._rewards = reward_service
        self._clock = clock or SystemClock()

    def _resolve_customer(self, vendor_id, phone: str) -> dict:
        customer = self._store.find_customer_by_phone(vendor_id, phone)
        if customer is None:
            customer = self._store.create_customer(vendor_id, {"phone": phone, "is_active": True})
            logger.info("Created customer %s for vendor %s", customer["id"], vendor_id)
        return customer

    def _transaction_fields(self, request: RecordTransactionRequest, totals: TransactionTotals) -> dict:
        return {
            "phone": request.phone,
            "type": request.transaction_type,
            "amount": totals.amount,
            "discount_percentage": request.discount_percentage,
            "description": request.description,
            "category": request.category,
        }

    def _lookup(self, vendor_id, transaction_id) -> tuple[Optional[dict], Optional[RejectionReason]]:
        tx = self._store.get_transaction(transaction_id)
        rejection = transaction_must_belong_to_vendor_policy(tx, vendor_id, transaction_id)
        return (None, rejection) if rejection else (tx, None)

    def _audit(self, vendor_id, tx: dict) -> None:
        snapshot = dict(tx)
        if tx.get("customer_id"):
            snapshot["customer"] = self._store.get_customer(tx["customer_id"])
        self._store.record_transaction_audit(tx["id"], vendor_id, json_safe(snapshot))

    # -- commands -----------------------------------------------------------

    def create_transaction(self, vendor_id, request: RecordTransactionRequest) -> dict:
        totals = compute_totals(request.items, request.discount_percentage)
        with self._store.atomic():
            customer = self._resolve_customer(vendor_id, request.phone)
            fields = self._transaction_fields(request, totals)
            fields["customer_id"] = customer["id"]
            tx = self._store.create_transaction(
                vendor_id, fields, [item.to_record() for item in request.items],
            )
            result = self._rewards.apply_transaction_rewards(
                vendor_id, customer, totals.amount, tx["id"],
            )
            if result.grants_reward:
                tx["reward"] = result.transaction_reward()
        logger.info("Recorded transaction %s (%s) for vendor %s", tx["id"], totals.amount, vendor_id)
        return {"transaction": tx, "reward": result.to_dict()}

    def update_transaction(self, vendor_id, transaction_id, request: RecordTransactionRequest) -> dict:
        totals = compute_totals(request.items, request.discount_percentage)
        with self._store.atomic():
            current, rejection = self._lookup(vendor_id, transaction_id)
            if rejection:
                return {"rejected": rejection}
            self._audit(vendor_id, current)

            fields = self._transaction_fields(request, totals)
            result = None
            if current["phone"] != request.phone:
                # A sale moved to another customer earns that customer a reward.
                customer = self._resolve_customer(vendor_id, request.phone)
                fields["customer_id"] = customer["id"]
                result = self._rewards.calculate_rewards(vendor_id, totals.amount, current["id"])
                self._rewards.update_customer_rewards(customer, vendor_id, result)

            tx = self._store.update_transaction(
                current["id"], fields, [item.to_record() for item in request.items],
            )
        logger.info("Updated transaction %s for vendor %s", tx["id"], vendor_id)
        return {
            "transaction": tx,
            "reward": result.to_dict() if result is not None else None,
        }

    def delete_transaction(self, vendor_id, transaction_id) -> dict:
        with self._store.atomic():
            current, rejection = self._lookup(vendor_id, transaction_id)
            if rejection:
                return {"rejected": rejection}
            self._audit(vendor_id, current)
            self._store.delete_transaction(current["id"])
        logger.info("Deleted transaction %s for vendor %s", current["id"], vendor_id)
        return {"deleted": current["id"]}

    # -- queries ------------------------------------------------------------

    def list_transactions(self, vendor_id) -> list[dict]:
        return self._store.list_transactions(vendor_id)

    def get_transaction(self, vendor_id, transaction_id) -> dict:
        tx, rejection = self._lookup(vendor_id, transaction_id)
        if rejection:
            return {"rejected": rejection}
        return {"transaction": tx}

    def get_transaction_details(self, vendor_id, transaction_id) -> dict:
        """Transaction plus customer, recomputed totals and invoice rows."""
        tx, rejection = self._lookup(vendor_id, transaction_id)
        if rejection:
            return {"rejected": rejection}
        totals = totals_for_record(tx)
        customer = self._store.get_customer(tx["customer_id"]) if tx.get("customer_id") else None
        return {
            "transaction": tx,
            "customer": customer,
            "subtotal": totals.subtotal,
            "discount_amount": totals.discount,
            "tax": totals.tax,
            "total": totals.amount,
            "rows": invoice_rows(tx),
        }
