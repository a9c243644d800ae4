"""
Rewardify Vendor Store - In-Memory Backend
==========================================
Dict-backed implementation of the persistence collaborator used by
every engine. Same surface and record shapes as DjangoVendorRepository;
used by tests and for running engines without a database.

Records are deep-copied on the way in and out so callers can never
mutate stored state by accident.
"""

from __future__ import annotations

import copy
import threading
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from core.time import Clock, SystemClock


def _key(value: Any) -> str:
    return str(value)


class InMemoryVendorStore:
    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._vendors: dict[str, dict] = {}
        self._customers: dict[str, dict] = {}
        self._policies: dict[str, dict] = {}  # vendor_id → policy
        self._transactions: dict[str, dict] = {}
        self._audits: list[dict] = []
        self._invoices: list[dict] = []
        self._gift_cards: dict[str, dict] = {}
        self._promotions: dict[str, dict] = {}

    # -- unit of work -------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            yield

    def _now(self):
        return self._clock.now_utc()

    def _stamp(self, record: dict) -> dict:
        now = self._now()
        record.setdefault("created_at", now)
        record["updated_at"] = now
        return record

    # -- vendors ------------------------------------------------------------

    def add_vendor(self, **fields) -> dict:
        with self._lock:
            vendor_id = _key(fields.pop("id", None) or uuid.uuid4())
            record = {
                "id": vendor_id,
                "name": "",
                "email": "",
                "phone": None,
                "company_name": "",
                "company_address": None,
                "tax_number": None,
                "tax_type": None,
                **fields,
            }
            self._vendors[vendor_id] = record
            return copy.deepcopy(record)

    def get_vendor(self, vendor_id) -> Optional[dict]:
        with self._lock:
            record = self._vendors.get(_key(vendor_id))
            return copy.deepcopy(record) if record is not None else None

    # -- reward policy ------------------------------------------------------

    def find_active_policy(self, vendor_id) -> Optional[dict]:
        with self._lock:
            record = self._policies.get(_key(vendor_id))
            if record is None or not record.get("is_active"):
                return None
            return copy.deepcopy(record)

    def get_reward_policy(self, vendor_id) -> Optional[dict]:
        with self._lock:
            record = self._policies.get(_key(vendor_id))
            return copy.deepcopy(record) if record is not None else None

    def save_reward_policy(self, vendor_id, record: dict) -> dict:
        with self._lock:
            existing = self._policies.get(_key(vendor_id))
            stored = copy.deepcopy(record)
            stored["vendor_id"] = _key(vendor_id)
            if existing is not None:
                stored["id"] = existing["id"]
                stored["created_at"] = existing["created_at"]
            else:
                stored["id"] = _key(uuid.uuid4())
            self._policies[_key(vendor_id)] = self._stamp(stored)
            return copy.deepcopy(stored)

    # -- customers ----------------------------------------------------------

    def create_customer(self, vendor_id, data: dict) -> dict:
        with self._lock:
            record = {
                "id": _key(uuid.uuid4()),
                "vendor_id": _key(vendor_id),
                "phone": None,
                "name": None,
                "email": None,
                "gender": "NA",
                "tax_number": None,
                "rewards": {},
                "is_active": True,
                **copy.deepcopy(data),
            }
            self._customers[record["id"]] = self._stamp(record)
            return copy.deepcopy(record)

    def get_customer(self, customer_id) -> Optional[dict]:
        with self._lock:
            record = self._customers.get(_key(customer_id))
            return copy.deepcopy(record) if record is not None else None

    def read_customer(self, customer_id) -> dict:
        record = self.get_customer(customer_id)
        if record is None:
            raise LookupError(f"Customer {customer_id} does not exist.")
        return record

    def find_customer_by_phone(self, vendor_id, phone: str) -> Optional[dict]:
        with self._lock:
            for record in self._customers.values():
                if record["vendor_id"] == _key(vendor_id) and record["phone"] == phone:
                    return copy.deepcopy(record)
            return None

    def list_customers(self, vendor_id) -> list[dict]:
        with self._lock:
            rows = [r for r in self._customers.values() if r["vendor_id"] == _key(vendor_id)]
            rows.sort(key=lambda r: r["created_at"], reverse=True)
            return copy.deepcopy(rows)

    def update_customer(self, customer_id, data: dict) -> dict:
        with self._lock:
            record = self._customers[_key(customer_id)]
            record.update(copy.deepcopy(data))
            self._stamp(record)
            return copy.deepcopy(record)

    def write_customer_rewards(self, customer_id, rewards: dict) -> None:
        with self._lock:
            record = self._customers[_key(customer_id)]
            record["rewards"] = copy.deepcopy(rewards)
            self._stamp(record)

    def delete_customer(self, customer_id) -> None:
        with self._lock:
            del self._customers[_key(customer_id)]

    # -- transactions -------------------------------------------------------

    def _items(self, items: list[dict]) -> list[dict]:
        return [{"id": _key(uuid.uuid4()), **copy.deepcopy(item)} for item in items]

    def create_transaction(self, vendor_id, data: dict, items: list[dict]) -> dict:
        with self._lock:
            record = {
                "id": _key(uuid.uuid4()),
                "vendor_id": _key(vendor_id),
                "reward": None,
                **copy.deepcopy(data),
                "items": self._items(items),
            }
            if record.get("customer_id") is not None:
                record["customer_id"] = _key(record["customer_id"])
            self._transactions[record["id"]] = self._stamp(record)
            return copy.deepcopy(record)

    def get_transaction(self, transaction_id) -> Optional[dict]:
        with self._lock:
            record = self._transactions.get(_key(transaction_id))
            return copy.deepcopy(record) if record is not None else None

    def find_transaction_by_short_id(self, vendor_id, short_id: str) -> Optional[dict]:
        with self._lock:
            for record in self._transactions.values():
                if record["vendor_id"] == _key(vendor_id) and record["id"].startswith(short_id):
                    return copy.deepcopy(record)
            return None

    def list_transactions(self, vendor_id, *, since=None, until=None) -> list[dict]:
        with self._lock:
            rows = []
            for record in self._transactions.values():
                if record["vendor_id"] != _key(vendor_id):
                    continue
                if since is not None and record["created_at"] < since:
                    continue
                if until is not None and record["created_at"] > until:
                    continue
                rows.append(record)
            rows.sort(key=lambda r: r["created_at"], reverse=True)
            return copy.deepcopy(rows)

    def update_transaction(self, transaction_id, data: dict, items: list[dict]) -> dict:
        with self._lock:
            record = self._transactions[_key(transaction_id)]
            record.update(copy.deepcopy(data))
            if record.get("customer_id") is not None:
                record["customer_id"] = _key(record["customer_id"])
            record["items"] = self._items(items)
            self._stamp(record)
            return copy.deepcopy(record)

    def write_transaction_reward(self, transaction_id, reward: dict) -> None:
        with self._lock:
            record = self._transactions[_key(transaction_id)]
            record["reward"] = copy.deepcopy(reward)
            self._stamp(record)

    def delete_transaction(self, transaction_id) -> None:
        with self._lock:
            tx_id = _key(transaction_id)
            self._invoices = [i for i in self._invoices if i["transaction_id"] != tx_id]
            del self._transactions[tx_id]

    def record_transaction_audit(self, transaction_id, vendor_id, original_values: dict) -> dict:
        with self._lock:
            record = {
                "id": _key(uuid.uuid4()),
                "transaction_id": _key(transaction_id),
                "vendor_id": _key(vendor_id),
                "original_values": copy.deepcopy(original_values),
                "timestamp": self._now(),
            }
            self._audits.append(record)
            return copy.deepcopy(record)

    def list_transaction_audits(self, transaction_id) -> list[dict]:
        with self._lock:
            return copy.deepcopy(
                [a for a in self._audits if a["transaction_id"] == _key(transaction_id)]
            )

    # -- invoices -----------------------------------------------------------

    def record_invoice_generation(
        self,
        transaction_id,
        reference_number: str,
        generated_by,
        metadata: Optional[dict] = None,
    ) -> dict:
        with self._lock:
            record = {
                "id": _key(uuid.uuid4()),
                "transaction_id": _key(transaction_id),
                "reference_number": reference_number,
                "generated_by": _key(generated_by) if generated_by is not None else None,
                "metadata": copy.deepcopy(metadata),
                "generated_at": self._now(),
            }
            self._invoices.append(record)
            return copy.deepcopy(record)

    def list_invoice_generations(self, transaction_id) -> list[dict]:
        with self._lock:
            return copy.deepcopy(
                [i for i in self._invoices if i["transaction_id"] == _key(transaction_id)]
            )

    # -- gift cards ---------------------------------------------------------

    def create_gift_card(self, vendor_id, data: dict) -> dict:
        with self._lock:
            record = {"id": _key(uuid.uuid4()), "vendor_id": _key(vendor_id), **copy.deepcopy(data)}
            self._gift_cards[record["id"]] = self._stamp(record)
            return copy.deepcopy(record)

    def get_gift_card(self, gift_card_id) -> Optional[dict]:
        with self._lock:
            record = self._gift_cards.get(_key(gift_card_id))
            return copy.deepcopy(record) if record is not None else None

    def list_gift_cards(self, vendor_id) -> list[dict]:
        with self._lock:
            rows = [r for r in self._gift_cards.values() if r["vendor_id"] == _key(vendor_id)]
            rows.sort(key=lambda r: r["created_at"], reverse=True)
            return copy.deepcopy(rows)

    def update_gift_card(self, gift_card_id, data: dict) -> dict:
        with self._lock:
            record = self._gift_cards[_key(gift_card_id)]
            record.update(copy.deepcopy(data))
            self._stamp(record)
            return copy.deepcopy(record)

    def delete_gift_card(self, gift_card_id) -> None:
        with self._lock:
            del self._gift_cards[_key(gift_card_id)]

    # -- promotions ---------------------------------------------------------

    def create_promotion(self, vendor_id, data: dict) -> dict:
        with self._lock:
            record = {
                "id": _key(uuid.uuid4()),
                "vendor_id": _key(vendor_id),
                "current_redemptions": 0,
                **copy.deepcopy(data),
            }
            self._promotions[record["id"]] = self._stamp(record)
            return copy.deepcopy(record)

    def get_promotion(self, promotion_id) -> Optional[dict]:
        with self._lock:
            record = self._promotions.get(_key(promotion_id))
            return copy.deepcopy(record) if record is not None else None

    def list_promotions(self, vendor_id) -> list[dict]:
        with self._lock:
            rows = [r for r in self._promotions.values() if r["vendor_id"] == _key(vendor_id)]
            rows.sort(key=lambda r: r["created_at"], reverse=True)
            return copy.deepcopy(rows)

    def update_promotion(self, promotion_id, data: dict) -> dict:
        with self._lock:
            record = self._promotions[_key(promotion_id)]
            record.update(copy.deepcopy(data))
            self._stamp(record)
            return copy.deepcopy(record)

    def delete_promotion(self, promotion_id) -> None:
        with self._lock:
            del self._promotions[_key(promotion_id)]
