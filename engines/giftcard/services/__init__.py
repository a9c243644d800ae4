"""
Rewardify Gift Card Engine — Service Layer
==========================================
Gift cards carry a random 16-character uppercase hex code. The
expiration date is always validity_days from the moment of the last
issue or update.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Optional

from core.time import Clock, SystemClock, add_days
from engines.giftcard.commands import GiftCardRequest
from engines.giftcard.policies import gift_card_must_belong_to_vendor_policy

logger = logging.getLogger("rewardify.giftcards")

GIFT_CARD_CODE_BYTES = 8


def generate_gift_card_code() -> str:
    return secrets.token_hex(GIFT_CARD_CODE_BYTES).upper()


class GiftCardService:
    def __init__(
        self,
        *,
        store,
        clock: Optional[Clock] = None,
        code_factory: Callable[[], str] = generate_gift_card_code,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._code_factory = code_factory

    def _fields(self, request: GiftCardRequest) -> dict:
        return {
            "amount": request.amount,
            "description": request.description,
            "terms": request.terms,
            "validity_days": request.validity_days,
            "expiration_date": add_days(self._clock.now_utc(), request.validity_days),
        }

    def _lookup(self, vendor_id, gift_card_id):
        card = self._store.get_gift_card(gift_card_id)
        rejection = gift_card_must_belong_to_vendor_policy(card, vendor_id, gift_card_id)
        return (None, rejection) if rejection else (card, None)

    def create_gift_card(self, vendor_id, request: GiftCardRequest) -> dict:
        card = self._store.create_gift_card(
            vendor_id, {"code": self._code_factory(), **self._fields(request)},
        )
        logger.info("Issued gift card %s for vendor %s", card["code"], vendor_id)
        return {"gift_card": card}

    def update_gift_card(self, vendor_id, gift_card_id, request: GiftCardRequest) -> dict:
        with self._store.atomic():
            _, rejection = self._lookup(vendor_id, gift_card_id)
            if rejection:
                return {"rejected": rejection}
            card = self._store.update_gift_card(gift_card_id, self._fields(request))
        return {"gift_card": card}

    def delete_gift_card(self, vendor_id, gift_card_id) -> dict:
        with self._store.atomic():
            _, rejection = self._lookup(vendor_id, gift_card_id)
            if rejection:
                return {"rejected": rejection}
            self._store.delete_gift_card(gift_card_id)
        logger.info("Deleted gift card %s for vendor %s", gift_card_id, vendor_id)
        return {"deleted": str(gift_card_id)}

    def list_gift_cards(self, vendor_id) -> list[dict]:
        return self._store.list_gift_cards(vendor_id)
