"""
Rewardify Django Adapter Wiring
===============================
Constructs the engine services over the Django repository.

This module is adapter-only glue:
- engines stay framework-free
- the vendor is resolved from the X-Vendor-Id header
- one dependency set per process, built lazily
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from django.conf import settings

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.contracts import VendorScope
from core.time import Clock, SystemClock
from core.vendor_store.repository import DjangoVendorRepository
from engines.customer.services import CustomerService
from engines.giftcard.services import GiftCardService
from engines.promotion.services import PromotionService
from engines.reporting.services import ReportingService
from engines.rewards.policies import DEFAULT_EXPIRY_DAYS
from engines.rewards.services import RewardService
from engines.transaction.invoice import InvoiceService
from engines.transaction.services import TransactionService

VENDOR_HEADER = "X-Vendor-Id"

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: Optional["RewardifyDependencies"] = None


@dataclass(frozen=True)
class RewardifyDependencies:
    store: DjangoVendorRepository
    clock: Clock
    rewards: RewardService
    transactions: TransactionService
    invoices: InvoiceService
    customers: CustomerService
    gift_cards: GiftCardService
    promotions: PromotionService
    reporting: ReportingService


def _create_dependencies() -> RewardifyDependencies:
    clock = SystemClock()
    store = DjangoVendorRepository(clock=clock)
    rewards = RewardService(
        store=store,
        clock=clock,
        default_expiry_days=getattr(settings, "REWARDIFY_DEFAULT_EXPIRY_DAYS", DEFAULT_EXPIRY_DAYS),
    )
    return RewardifyDependencies(
        store=store,
        clock=clock,
        rewards=rewards,
        transactions=TransactionService(store=store, reward_service=rewards, clock=clock),
        invoices=InvoiceService(store=store, clock=clock),
        customers=CustomerService(store=store, clock=clock),
        gift_cards=GiftCardService(store=store, clock=clock),
        promotions=PromotionService(store=store),
        reporting=ReportingService(store=store, clock=clock),
    )


def build_dependencies() -> RewardifyDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the cached wiring so the next request rebuilds it from settings."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None


def resolve_vendor(
    headers: Mapping[str, str],
    deps: RewardifyDependencies,
) -> Union[VendorScope, RejectionReason]:
    raw = headers.get(VENDOR_HEADER)
    try:
        vendor_id = uuid.UUID(str(raw))
    except ValueError:
        vendor_id = None
    if vendor_id is None or deps.store.get_vendor(vendor_id) is None:
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message="A known vendor id is required in the X-Vendor-Id header.",
            policy_name="vendor_must_be_known_policy",
        )
    return VendorScope(vendor_id=vendor_id)
