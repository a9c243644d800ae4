"""
Rewardify Vendor Store - Django Repository
==========================================
ORM-backed persistence collaborator. Returns plain dict records with
the same shapes as InMemoryVendorStore so engines never see models.

Customer reads made inside an atomic block lock the row
(select_for_update) so concurrent reward appends to the same ledger
serialize instead of overwriting each other.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from django.db import transaction

from core.time import Clock, SystemClock
from core.vendor_store.models import (
    Customer,
    GiftCard,
    InvoiceGeneration,
    Promotion,
    RewardPolicy,
    Transaction,
    TransactionAudit,
    TransactionItem,
    Vendor,
)


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None


def _str_id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _uuid_prefix_range(prefix: str) -> Optional[tuple[uuid.UUID, uuid.UUID]]:
    """Lowest and highest UUIDs whose text form starts with `prefix`."""
    digits = prefix.replace("-", "")
    if not digits or len(digits) > 32:
        return None
    try:
        low = uuid.UUID(digits.ljust(32, "0"))
        high = uuid.UUID(digits.ljust(32, "f"))
    except ValueError:
        return None
    # Rejects misplaced hyphens and upper-case digits.
    if not str(low).startswith(prefix):
        return None
    return low, high


def _save_changes(instance, data: dict) -> None:
    for field_name, value in data.items():
        setattr(instance, field_name, value)
    # Only the submitted columns are written; a concurrent ledger append survives.
    instance.save(update_fields=[*data, "updated_at"])
    instance.refresh_from_db()


# ── Serializers ───────────────────────────────────────────────

def vendor_to_dict(vendor: Vendor) -> dict:
    return {
        "id": str(vendor.id),
        "name": vendor.name,
        "email": vendor.email,
        "phone": vendor.phone,
        "company_name": vendor.company_name,
        "company_address": vendor.company_address,
        "tax_number": vendor.tax_number,
        "tax_type": vendor.tax_type,
    }


def customer_to_dict(customer: Customer) -> dict:
    return {
        "id": str(customer.id),
        "vendor_id": str(customer.vendor_id),
        "phone": customer.phone,
        "name": customer.name,
        "email": customer.email,
        "gender": customer.gender,
        "tax_number": customer.tax_number,
        "rewards": customer.rewards if customer.rewards is not None else {},
        "is_active": customer.is_active,
        "created_at": customer.created_at,
        "updated_at": customer.updated_at,
    }


def policy_to_dict(policy: RewardPolicy) -> dict:
    return {
        "id": str(policy.id),
        "vendor_id": str(policy.vendor_id),
        "type": policy.type,
        "name": policy.name,
        "config": policy.config or {},
        "expiry": policy.expiry,
        "expires_at": policy.expires_at,
        "is_active": policy.is_active,
        "created_at": policy.created_at,
        "updated_at": policy.updated_at,
    }


def item_to_dict(item: TransactionItem) -> dict:
    return {
        "id": str(item.id),
        "name": item.name,
        "quantity": item.quantity,
        "price": item.price,
        "tax_rate": item.tax_rate,
        "total_amount": item.total_amount,
        "category": item.category,
    }


def transaction_to_dict(tx: Transaction) -> dict:
    return {
        "id": str(tx.id),
        "vendor_id": str(tx.vendor_id),
        "customer_id": _str_id(tx.customer_id),
        "phone": tx.phone,
        "type": tx.type,
        "amount": tx.amount,
        "discount_percentage": tx.discount_percentage,
        "description": tx.description,
        "category": tx.category,
        "reward": tx.reward,
        "items": [item_to_dict(item) for item in tx.items.all()],
        "created_at": tx.created_at,
        "updated_at": tx.updated_at,
    }


def gift_card_to_dict(card: GiftCard) -> dict:
    return {
        "id": str(card.id),
        "vendor_id": str(card.vendor_id),
        "code": card.code,
        "amount": card.amount,
        "description": card.description,
        "terms": card.terms,
        "validity_days": card.validity_days,
        "expiration_date": card.expiration_date,
        "created_at": card.created_at,
        "updated_at": card.updated_at,
    }


def promotion_to_dict(promotion: Promotion) -> dict:
    return {
        "id": str(promotion.id),
        "vendor_id": str(promotion.vendor_id),
        "name": promotion.name,
        "description": promotion.description,
        "category": promotion.category,
        "original_price": promotion.original_price,
        "updated_price": promotion.updated_price,
        "discount_percent": promotion.discount_percent,
        "images": list(promotion.images or []),
        "start_date": promotion.start_date,
        "end_date": promotion.end_date,
        "is_active": promotion.is_active,
        "max_redemptions": promotion.max_redemptions,
        "current_redemptions": promotion.current_redemptions,
        "created_at": promotion.created_at,
        "updated_at": promotion.updated_at,
    }


def _audit_to_dict(audit: TransactionAudit) -> dict:
    return {
        "id": str(audit.id),
        "transaction_id": str(audit.transaction_id),
        "vendor_id": str(audit.vendor_id),
        "original_values": audit.original_values,
        "timestamp": audit.timestamp,
    }


def _invoice_to_dict(invoice: InvoiceGeneration) -> dict:
    return {
        "id": str(invoice.id),
        "transaction_id": str(invoice.transaction_id),
        "reference_number": invoice.reference_number,
        "generated_by": invoice.generated_by,
        "metadata": invoice.metadata,
        "generated_at": invoice.generated_at,
    }


# ── Repository ────────────────────────────────────────────────

class DjangoVendorRepository:
    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SystemClock()

    def atomic(self):
        return transaction.atomic()

    # -- vendors ------------------------------------------------------------

    def get_vendor(self, vendor_id) -> Optional[dict]:
        pk = _as_uuid(vendor_id)
        if pk is None:
            return None
        vendor = Vendor.objects.filter(id=pk, is_active=True).first()
        return vendor_to_dict(vendor) if vendor is not None else None

    # -- reward policy ------------------------------------------------------

    def find_active_policy(self, vendor_id) -> Optional[dict]:
        policy = RewardPolicy.objects.filter(vendor_id=_as_uuid(vendor_id), is_active=True).first()
        return policy_to_dict(policy) if policy is not None else None

    def get_reward_policy(self, vendor_id) -> Optional[dict]:
        policy = RewardPolicy.objects.filter(vendor_id=_as_uuid(vendor_id)).first()
        return policy_to_dict(policy) if policy is not None else None

    def save_reward_policy(self, vendor_id, record: dict) -> dict:
        policy, _ = RewardPolicy.objects.update_or_create(
            vendor_id=_as_uuid(vendor_id),
            defaults={
                "type": record["type"],
                "name": record["name"],
                "config": record["config"],
                "expiry": record["expiry"],
                "expires_at": record["expires_at"],
                "is_active": record["is_active"],
            },
        )
        return policy_to_dict(policy)

    # -- customers ----------------------------------------------------------

    def create_customer(self, vendor_id, data: dict) -> dict:
        customer = Customer.objects.create(vendor_id=_as_uuid(vendor_id), **data)
        return customer_to_dict(customer)

    def get_customer(self, customer_id) -> Optional[dict]:
        pk = _as_uuid(customer_id)
        if pk is None:
            return None
        customer = Customer.objects.filter(id=pk).first()
        return customer_to_dict(customer) if customer is not None else None

    def read_customer(self, customer_id) -> dict:
        queryset = Customer.objects.all()
        if transaction.get_connection().in_atomic_block:
            queryset = queryset.select_for_update()
        return customer_to_dict(queryset.get(id=_as_uuid(customer_id)))

    def find_customer_by_phone(self, vendor_id, phone: str) -> Optional[dict]:
        customer = Customer.objects.filter(vendor_id=_as_uuid(vendor_id), phone=phone).first()
        return customer_to_dict(customer) if customer is not None else None

    def list_customers(self, vendor_id) -> list[dict]:
        return [
            customer_to_dict(c)
            for c in Customer.objects.filter(vendor_id=_as_uuid(vendor_id)).order_by("-created_at")
        ]

    def update_customer(self, customer_id, data: dict) -> dict:
        customer = Customer.objects.get(id=_as_uuid(customer_id))
        _save_changes(customer, data)
        return customer_to_dict(customer)

    def write_customer_rewards(self, customer_id, rewards: dict) -> None:
        updated = Customer.objects.filter(id=_as_uuid(customer_id)).update(rewards=rewards)
        if updated != 1:
            raise Customer.DoesNotExist(f"Customer {customer_id} does not exist.")

    def delete_customer(self, customer_id) -> None:
        Customer.objects.filter(id=_as_uuid(customer_id)).delete()

    # -- transactions -------------------------------------------------------

    def _create_items(self, tx: Transaction, items: list[dict]) -> None:
        TransactionItem.objects.bulk_create(
            [
                TransactionItem(transaction=tx, position=index, **item)
                for index, item in enumerate(items)
            ]
        )

    def _load_transaction(self, pk) -> Transaction:
        return Transaction.objects.prefetch_related("items").get(id=pk)

    def create_transaction(self, vendor_id, data: dict, items: list[dict]) -> dict:
        fields = dict(data)
        customer_id = fields.pop("customer_id", None)
        tx = Transaction.objects.create(
            vendor_id=_as_uuid(vendor_id),
            customer_id=_as_uuid(customer_id) if customer_id is not None else None,
            **fields,
        )
        self._create_items(tx, items)
        return transaction_to_dict(self._load_transaction(tx.id))

    def get_transaction(self, transaction_id) -> Optional[dict]:
        pk = _as_uuid(transaction_id)
        if pk is None:
            return None
        tx = Transaction.objects.prefetch_related("items").filter(id=pk).first()
        return transaction_to_dict(tx) if tx is not None else None

    def find_transaction_by_short_id(self, vendor_id, short_id: str) -> Optional[dict]:
        bounds = _uuid_prefix_range(short_id or "")
        if bounds is None:
            return None
        tx = (
            Transaction.objects
            .filter(vendor_id=_as_uuid(vendor_id), id__range=bounds)
            .prefetch_related("items")
            .first()
        )
        return transaction_to_dict(tx) if tx is not None else None

    def list_transactions(self, vendor_id, *, since=None, until=None) -> list[dict]:
        queryset = Transaction.objects.filter(vendor_id=_as_uuid(vendor_id))
        if since is not None:
            queryset = queryset.filter(created_at__gte=since)
        if until is not None:
            queryset = queryset.filter(created_at__lte=until)
        return [
            transaction_to_dict(tx)
            for tx in queryset.prefetch_related("items").order_by("-created_at")
        ]

    def update_transaction(self, transaction_id, data: dict, items: list[dict]) -> dict:
        tx = Transaction.objects.get(id=_as_uuid(transaction_id))
        fields = dict(data)
        if "customer_id" in fields:
            customer_id = fields.pop("customer_id")
            tx.customer_id = _as_uuid(customer_id) if customer_id is not None else None
        for field_name, value in fields.items():
            setattr(tx, field_name, value)
        tx.save()
        tx.items.all().delete()
        self._create_items(tx, items)
        return transaction_to_dict(self._load_transaction(tx.id))

    def write_transaction_reward(self, transaction_id, reward: dict) -> None:
        updated = Transaction.objects.filter(id=_as_uuid(transaction_id)).update(reward=reward)
        if updated != 1:
            raise Transaction.DoesNotExist(f"Transaction {transaction_id} does not exist.")

    def delete_transaction(self, transaction_id) -> None:
        pk = _as_uuid(transaction_id)
        with transaction.atomic():
            TransactionItem.objects.filter(transaction_id=pk).delete()
            InvoiceGeneration.objects.filter(transaction_id=pk).delete()
            Transaction.objects.filter(id=pk).delete()

    def record_transaction_audit(self, transaction_id, vendor_id, original_values: dict) -> dict:
        audit = TransactionAudit.objects.create(
            transaction_id=_as_uuid(transaction_id),
            vendor_id=_as_uuid(vendor_id),
            original_values=original_values,
            timestamp=self._clock.now_utc(),
        )
        return _audit_to_dict(audit)

    def list_transaction_audits(self, transaction_id) -> list[dict]:
        return [
            _audit_to_dict(a)
            for a in TransactionAudit.objects.filter(transaction_id=_as_uuid(transaction_id))
        ]

    # -- invoices -----------------------------------------------------------

    def record_invoice_generation(
        self,
        transaction_id,
        reference_number: str,
        generated_by,
        metadata: Optional[dict] = None,
    ) -> dict:
        invoice = InvoiceGeneration.objects.create(
            transaction_id=_as_uuid(transaction_id),
            reference_number=reference_number,
            generated_by=_str_id(generated_by),
            metadata=metadata,
            generated_at=self._clock.now_utc(),
        )
        return _invoice_to_dict(invoice)

    def list_invoice_generations(self, transaction_id) -> list[dict]:
        return [
            _invoice_to_dict(i)
            for i in InvoiceGeneration.objects.filter(transaction_id=_as_uuid(transaction_id))
        ]

    # -- gift cards ---------------------------------------------------------

    def create_gift_card(self, vendor_id, data: dict) -> dict:
        return gift_card_to_dict(GiftCard.objects.create(vendor_id=_as_uuid(vendor_id), **data))

    def get_gift_card(self, gift_card_id) -> Optional[dict]:
        pk = _as_uuid(gift_card_id)
        if pk is None:
            return None
        card = GiftCard.objects.filter(id=pk).first()
        return gift_card_to_dict(card) if card is not None else None

    def list_gift_cards(self, vendor_id) -> list[dict]:
        return [
            gift_card_to_dict(c)
            for c in GiftCard.objects.filter(vendor_id=_as_uuid(vendor_id)).order_by("-created_at")
        ]

    def update_gift_card(self, gift_card_id, data: dict) -> dict:
        card = GiftCard.objects.get(id=_as_uuid(gift_card_id))
        _save_changes(card, data)
        return gift_card_to_dict(card)

    def delete_gift_card(self, gift_card_id) -> None:
        GiftCard.objects.filter(id=_as_uuid(gift_card_id)).delete()

    # -- promotions ---------------------------------------------------------

    def create_promotion(self, vendor_id, data: dict) -> dict:
        return promotion_to_dict(Promotion.objects.create(vendor_id=_as_uuid(vendor_id), **data))

    def get_promotion(self, promotion_id) -> Optional[dict]:
        pk = _as_uuid(promotion_id)
        if pk is None:
            return None
        promotion = Promotion.objects.filter(id=pk).first()
        return promotion_to_dict(promotion) if promotion is not None else None

    def list_promotions(self, vendor_id) -> list[dict]:
        return [
            promotion_to_dict(p)
            for p in Promotion.objects.filter(vendor_id=_as_uuid(vendor_id)).order_by("-created_at")
        ]

    def update_promotion(self, promotion_id, data: dict) -> dict:
        promotion = Promotion.objects.get(id=_as_uuid(promotion_id))
        _save_changes(promotion, data)
        return promotion_to_dict(promotion)

    def delete_promotion(self, promotion_id) -> None:
        Promotion.objects.filter(id=_as_uuid(promotion_id)).delete()
