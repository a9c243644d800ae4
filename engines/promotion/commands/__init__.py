"""
Rewardify Promotion Engine — Commands
=====================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from core.time import parse_timestamp


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # Date-only and offset-less inputs are read as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "0", "no", "off")
    return bool(value)


@dataclass(frozen=True)
class PromotionRequest:
    """Create a promotion, or replace an existing one's fields."""
    name: str
    category: str
    original_price: float
    discount_percent: float
    updated_price: Optional[float] = None
    description: Optional[str] = None
    images: Tuple[str, ...] = field(default_factory=tuple)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool = True
    max_redemptions: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or len(self.name) < 2:
            raise ValueError("name must be at least 2 characters.")
        if not isinstance(self.category, str) or not self.category:
            raise ValueError("category must be non-empty.")
        if not _is_number(self.original_price) or self.original_price <= 0:
            raise ValueError("original_price must be positive.")
        if not _is_number(self.discount_percent) or not 0 <= self.discount_percent <= 100:
            raise ValueError("discount_percent must be between 0 and 100.")
        if self.updated_price is not None and not _is_number(self.updated_price):
            raise ValueError("updated_price must be a number.")
        if not all(isinstance(image, str) for image in self.images):
            raise ValueError("images must be strings.")
        if self.start_date and self.end_date and _aware(self.end_date) < _aware(self.start_date):
            raise ValueError("end_date must not be before start_date.")
        if self.max_redemptions is not None and (
            isinstance(self.max_redemptions, bool)
            or not isinstance(self.max_redemptions, int)
            or self.max_redemptions < 1
        ):
            raise ValueError("max_redemptions must be an integer >= 1.")

    @property
    def resolved_price(self) -> float:
        if self.updated_price is not None:
            return self.updated_price
        return self.original_price * (1 - self.discount_percent / 100)

    def to_record(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "original_price": self.original_price,
            "discount_percent": self.discount_percent,
            "updated_price": self.resolved_price,
            "description": self.description,
            "images": list(self.images),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_active": self.is_active,
            "max_redemptions": self.max_redemptions,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PromotionRequest":
        def pick(camel: str, snake: str, default=None):
            return payload.get(camel, payload.get(snake, default))

        images = payload.get("images") or []
        if not isinstance(images, list):
            raise ValueError("images must be a list.")
        try:
            start = _aware(parse_timestamp(pick("startDate", "start_date")))
            end = _aware(parse_timestamp(pick("endDate", "end_date")))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid promotion date: {exc}") from exc
        is_active = pick("isActive", "is_active", True)
        return cls(
            name=payload.get("name"),
            category=payload.get("category"),
            original_price=pick("originalPrice", "original_price"),
            discount_percent=pick("discountPercent", "discount_percent", 0),
            updated_price=pick("updatedPrice", "updated_price"),
            description=payload.get("description") or None,
            images=tuple(images),
            start_date=start,
            end_date=end,
            is_active=_flag(is_active),
            max_redemptions=pick("maxRedemptions", "max_redemptions"),
        )
