"""
Rewardify Promotion Engine — Application Service
"""

from __future__ import annotations

import logging
from typing import Optional

from engines.promotion.commands import PromotionRequest
from engines.promotion.policies import promotion_must_belong_to_vendor_policy

logger = logging.getLogger("rewardify.promotions")


class PromotionService:
    def __init__(self, *, store):
        self._store = store

    def _lookup(self, vendor_id, promotion_id) -> tuple[Optional[dict], Optional[object]]:
        promotion = self._store.get_promotion(promotion_id)
        rejection = promotion_must_belong_to_vendor_policy(promotion, vendor_id, promotion_id)
        return (None, rejection) if rejection else (promotion, None)

    def create_promotion(self, vendor_id, request: PromotionRequest) -> dict:
        promotion = self._store.create_promotion(vendor_id, request.to_record())
        logger.info("Created promotion %s for vendor %s", promotion["id"], vendor_id)
        return {"promotion": promotion}

    def update_promotion(self, vendor_id, promotion_id, request: PromotionRequest) -> dict:
        with self._store.atomic():
            _, rejection = self._lookup(vendor_id, promotion_id)
            if rejection:
                return {"rejected": rejection}
            promotion = self._store.update_promotion(promotion_id, request.to_record())
        return {"promotion": promotion}

    def delete_promotion(self, vendor_id, promotion_id) -> dict:
        with self._store.atomic():
            _, rejection = self._lookup(vendor_id, promotion_id)
            if rejection:
                return {"rejected": rejection}
            self._store.delete_promotion(promotion_id)
        logger.info("Deleted promotion %s for vendor %s", promotion_id, vendor_id)
        return {"deleted": str(promotion_id)}

    def list_promotions(self, vendor_id) -> list[dict]:
        return self._store.list_promotions(vendor_id)

    def get_promotion(self, vendor_id, promotion_id) -> dict:
        promotion, rejection = self._lookup(vendor_id, promotion_id)
        if rejection:
            return {"rejected": rejection}
        return {"promotion": promotion}
