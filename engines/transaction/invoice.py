"""
Rewardify Transaction Engine — Invoices
=======================================
Reference numbers, invoice table rows and PDF generation for a
recorded transaction.

Reference format: INV-<YYYYMMDD of creation>-<first segment of the
transaction uuid>. The short id is resolved back to the transaction by
prefix match within the requesting vendor.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from core.documents import render_invoice_pdf
from core.time import Clock, SystemClock, parse_timestamp, to_iso
from engines.transaction.policies import (
    reference_must_be_well_formed_policy,
    transaction_must_belong_to_vendor_policy,
)

logger = logging.getLogger("rewardify.invoices")

INVOICE_TAX_LABEL = "GST"
INVOICE_FOOTER = (
    "This is a computer-generated invoice and does not require a physical signature."
)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return parse_timestamp(value)


def reference_number(transaction_id, created_at) -> str:
    short_id = str(transaction_id).split("-")[0]
    return f"INV-{_as_datetime(created_at).strftime('%Y%m%d')}-{short_id}"


def short_id_from_reference(reference: str) -> Optional[str]:
    parts = (reference or "").split("-")
    if len(parts) < 3 or not parts[2]:
        return None
    return parts[2]


def invoice_rows(transaction: dict) -> list[list]:
    """One row per item, in the column order of the printed table."""
    discount_pct = transaction.get("discount_percentage") or 0
    rows = []
    for index, item in enumerate(transaction.get("items", []), start=1):
        subtotal = item["price"] * item["quantity"]
        tax_rate = item.get("tax_rate") or 0
        rows.append([
            index,
            item["name"],
            item["quantity"],
            item["price"],
            subtotal,
            discount_pct,
            subtotal * discount_pct / 100,
            tax_rate,
            INVOICE_TAX_LABEL,
            subtotal * tax_rate / 100,
            item.get("total_amount", subtotal),
        ])
    return rows


def format_address(address: Any) -> str:
    if not address:
        return ""
    if isinstance(address, str):
        try:
            address = json.loads(address)
        except ValueError:
            return address
    if not isinstance(address, dict):
        return str(address)
    parts = [address.get(k) for k in ("street", "city", "state", "country", "pincode")]
    return ", ".join(str(p) for p in parts if p)


def build_invoice_plan(
    transaction: dict,
    *,
    customer: Optional[dict],
    vendor: Optional[dict],
    totals: dict,
) -> dict:
    vendor = vendor or {}
    customer = customer or {}
    created = _as_datetime(transaction["created_at"])

    company_lines = []
    address = format_address(vendor.get("company_address"))
    if address:
        company_lines.append(address)
    if vendor.get("phone"):
        company_lines.append(f"Tel: {vendor['phone']}")
    if vendor.get("email"):
        company_lines.append(f"Email: {vendor['email']}")
    if vendor.get("tax_number"):
        company_lines.append(f"Tax Number: {vendor['tax_number']}")
    if vendor.get("tax_type"):
        company_lines.append(f"Tax Type: {vendor['tax_type']}")

    bill_to = []
    if customer.get("name"):
        bill_to.append(f"Name: {customer['name']}")
    phone = customer.get("phone") or transaction.get("phone")
    if phone:
        bill_to.append(f"Phone: {phone}")
    if customer.get("email"):
        bill_to.append(f"Email: {customer['email']}")
    if customer.get("tax_number"):
        bill_to.append(f"Tax Number: {customer['tax_number']}")

    return {
        "company": {"name": vendor.get("company_name") or "", "lines": company_lines},
        "title": "INVOICE",
        "reference_number": reference_number(transaction["id"], created),
        "date": created.strftime("%d/%m/%Y"),
        "bill_to": bill_to,
        "rows": invoice_rows(transaction),
        "summary": [
            ("Subtotal:", totals["subtotal"]),
            ("Discount:", totals["discount_amount"]),
            ("Tax:", totals["tax"]),
        ],
        "total": totals["total"],
        "terms": transaction.get("description"),
        "footer": INVOICE_FOOTER,
    }


class InvoiceService:
    def __init__(self, *, store, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or SystemClock()

    def _render(self, transaction: dict) -> bytes:
        from engines.transaction.services import totals_for_record

        totals = totals_for_record(transaction)
        customer = (
            self._store.get_customer(transaction["customer_id"])
            if transaction.get("customer_id") else None
        )
        vendor = self._store.get_vendor(transaction["vendor_id"])
        plan = build_invoice_plan(
            transaction,
            customer=customer,
            vendor=vendor,
            totals={
                "subtotal": totals.subtotal,
                "discount_amount": totals.discount,
                "tax": totals.tax,
                "total": totals.amount,
            },
        )
        return render_invoice_pdf(plan)

    def generate(self, vendor_id, reference: str, *, requester: Optional[dict] = None) -> dict:
        """
        Resolve a reference number to one of the vendor's transactions,
        record the generation and return the PDF.

        requester: optional {"ip", "user_agent"} of the caller, stored in
        the generation metadata.
        """
        short_id = short_id_from_reference(reference)
        rejection = reference_must_be_well_formed_policy(short_id, reference)
        if rejection:
            return {"rejected": rejection}

        tx = self._store.find_transaction_by_short_id(vendor_id, short_id)
        rejection = transaction_must_belong_to_vendor_policy(tx, vendor_id, short_id)
        if rejection:
            return {"rejected": rejection}

        requester = requester or {}
        metadata = {
            "userLocation": {
                "ip": requester.get("ip"),
                "userAgent": requester.get("user_agent"),
                "timestamp": to_iso(self._clock.now_utc()),
            },
        }
        return self._generate(vendor_id, tx, reference, metadata)

    def generate_for_transaction(self, vendor_id, transaction_id) -> dict:
        tx = self._store.get_transaction(transaction_id)
        rejection = transaction_must_belong_to_vendor_policy(tx, vendor_id, transaction_id)
        if rejection:
            return {"rejected": rejection}
        return self._generate(vendor_id, tx, reference_number(tx["id"], tx["created_at"]), None)

    def _generate(self, vendor_id, tx: dict, reference: str, metadata: Optional[dict]) -> dict:
        pdf = self._render(tx)
        self._store.record_invoice_generation(
            tx["id"], reference, generated_by=vendor_id, metadata=metadata,
        )
        logger.info("Generated invoice %s for transaction %s", reference, tx["id"])
        return {
            "reference_number": reference,
            "transaction_id": tx["id"],
            "pdf": pdf,
        }
