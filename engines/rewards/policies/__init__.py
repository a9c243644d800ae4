"""
Rewardify Rewards Engine — Policy Variants
==========================================
A vendor's reward policy is one of a closed set of shapes. Each shape
carries only the parameters it needs and validates them at construction,
so evaluation never has to second-guess its config bag.

    PercentagePolicy   PERCENTAGE_DISCOUNT, PERCENTAGE_CREDIT
    FixedAmountPolicy  FIXED_DISCOUNT, FLAT_DISCOUNT, FIXED_CREDIT
    PointPolicy        POINT_BASED
    CustomPolicy       CUSTOM (rule blob; evaluation is an extension point)
    NoRewardPolicy     NONE
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

logger = logging.getLogger("rewardify.rewards")

# ── Policy Types ──────────────────────────────────────────────

PERCENTAGE_DISCOUNT = "PERCENTAGE_DISCOUNT"
FIXED_DISCOUNT = "FIXED_DISCOUNT"
FLAT_DISCOUNT = "FLAT_DISCOUNT"
PERCENTAGE_CREDIT = "PERCENTAGE_CREDIT"
FIXED_CREDIT = "FIXED_CREDIT"
POINT_BASED = "POINT_BASED"
CUSTOM = "CUSTOM"
NONE = "NONE"

VALID_POLICY_TYPES = frozenset({
    PERCENTAGE_DISCOUNT, FIXED_DISCOUNT, FLAT_DISCOUNT,
    PERCENTAGE_CREDIT, FIXED_CREDIT, POINT_BASED, CUSTOM, NONE,
})

PERCENTAGE_TYPES = frozenset({PERCENTAGE_DISCOUNT, PERCENTAGE_CREDIT})
FIXED_AMOUNT_TYPES = frozenset({FIXED_DISCOUNT, FLAT_DISCOUNT, FIXED_CREDIT})
CREDIT_TYPES = frozenset({PERCENTAGE_CREDIT, FIXED_CREDIT})

# Granted rewards of these types expire; the rest apply at the till.
EXPIRING_POLICY_TYPES = frozenset({PERCENTAGE_CREDIT, FIXED_CREDIT, POINT_BASED, CUSTOM})

DEFAULT_EXPIRY_DAYS = 365
CURRENCY_SYMBOL = "₹"


def display_number(value: float) -> str:
    """10.0 → '10', 12.5 → '12.5'."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def _check_expiry(policy_type: str, expiry_days: Optional[int]) -> None:
    if policy_type in EXPIRING_POLICY_TYPES:
        if expiry_days is None:
            return
        if isinstance(expiry_days, bool) or not isinstance(expiry_days, int) or expiry_days < 1:
            raise ValueError("expiry_days must be a positive integer.")
    elif expiry_days is not None:
        raise ValueError(f"{policy_type} rewards do not expire; expiry_days must be None.")


def _check_non_negative(value: Any, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number.")
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0.")


# ══════════════════════════════════════════════════════════════
# EVALUATION OUTCOME
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RewardOutcome:
    amount: float
    description: str
    metadata: dict = field(default_factory=dict)


# ══════════════════════════════════════════════════════════════
# VARIANTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PercentagePolicy:
    policy_type: str
    percentage: float
    expiry_days: Optional[int] = None

    def __post_init__(self):
        if self.policy_type not in PERCENTAGE_TYPES:
            raise ValueError(f"Invalid percentage policy type: {self.policy_type}")
        _check_non_negative(self.percentage, "percentage")
        if self.percentage > 100:
            raise ValueError("percentage must be <= 100.")
        _check_expiry(self.policy_type, self.expiry_days)

    def evaluate(self, total_amount: float) -> RewardOutcome:
        kind = "store credit" if self.policy_type in CREDIT_TYPES else "instant discount"
        return RewardOutcome(
            amount=total_amount * self.percentage / 100,
            description=f"{display_number(self.percentage)}% {kind}",
            metadata={"percentage": self.percentage},
        )

    def to_config(self) -> dict:
        return {"percentage": self.percentage}


@dataclass(frozen=True)
class FixedAmountPolicy:
    policy_type: str
    amount: float
    expiry_days: Optional[int] = None

    def __post_init__(self):
        if self.policy_type not in FIXED_AMOUNT_TYPES:
            raise ValueError(f"Invalid fixed-amount policy type: {self.policy_type}")
        _check_non_negative(self.amount, "amount")
        _check_expiry(self.policy_type, self.expiry_days)

    def evaluate(self, total_amount: float) -> RewardOutcome:
        kind = "store credit" if self.policy_type in CREDIT_TYPES else "instant discount"
        return RewardOutcome(
            amount=self.amount,
            description=f"{CURRENCY_SYMBOL}{display_number(self.amount)} {kind}",
            metadata={"amount": self.amount},
        )

    def to_config(self) -> dict:
        return {"amount": self.amount}


@dataclass(frozen=True)
class PointPolicy:
    points_per_rupee: float
    rupees_per_point: float
    expiry_days: Optional[int] = None
    policy_type: str = POINT_BASED

    def __post_init__(self):
        if self.policy_type != POINT_BASED:
            raise ValueError(f"Invalid point policy type: {self.policy_type}")
        _check_non_negative(self.points_per_rupee, "points_per_rupee")
        _check_non_negative(self.rupees_per_point, "rupees_per_point")
        _check_expiry(self.policy_type, self.expiry_days)

    def evaluate(self, total_amount: float) -> RewardOutcome:
        points = total_amount * self.points_per_rupee
        # rupeesPerPoint is kept for redemption; earning does not use it.
        return RewardOutcome(
            amount=points,
            description=f"{display_number(points)} points earned",
            metadata={
                "pointsPerRupee": self.points_per_rupee,
                "rupeesPerPoint": self.rupees_per_point,
            },
        )

    def to_config(self) -> dict:
        return {
            "pointsPerRupee": self.points_per_rupee,
            "rupeesPerPoint": self.rupees_per_point,
        }


@dataclass(frozen=True)
class CustomPolicy:
    rules: Any
    expiry_days: Optional[int] = None
    policy_type: str = CUSTOM

    def __post_init__(self):
        if self.policy_type != CUSTOM:
            raise ValueError(f"Invalid custom policy type: {self.policy_type}")
        _check_expiry(self.policy_type, self.expiry_days)

    def evaluate(self, total_amount: float) -> RewardOutcome:
        try:
            parsed = json.loads(self.rules)
        except (TypeError, ValueError):
            logger.warning("Invalid custom reward rules; granting no reward.")
            return RewardOutcome(amount=0, description="Invalid custom rules")
        # Extension point: no rule semantics are defined yet.
        return RewardOutcome(
            amount=0,
            description="Custom reward applied",
            metadata={"rules": parsed},
        )

    def to_config(self) -> dict:
        return {"rules": self.rules}


@dataclass(frozen=True)
class NoRewardPolicy:
    policy_type: str = NONE
    expiry_days: Optional[int] = None

    def __post_init__(self):
        if self.policy_type != NONE:
            raise ValueError(f"Invalid policy type for NoRewardPolicy: {self.policy_type}")
        _check_expiry(self.policy_type, self.expiry_days)

    def evaluate(self, total_amount: float) -> RewardOutcome:
        return RewardOutcome(amount=0, description="No rewards applicable")

    def to_config(self) -> dict:
        return {}


RewardPolicy = Union[
    PercentagePolicy, FixedAmountPolicy, PointPolicy, CustomPolicy, NoRewardPolicy,
]


def _number(config: dict, key: str) -> float:
    # Missing or null parameters count as zero, as the settings form stores them.
    value = config.get(key)
    return 0 if value is None else value


def build_policy(
    policy_type: str,
    config: Optional[dict] = None,
    expiry_days: Optional[int] = None,
) -> RewardPolicy:
    """Construct the variant for a stored (type, config, expiry) triple."""
    config = config or {}
    if policy_type in PERCENTAGE_TYPES:
        return PercentagePolicy(policy_type, _number(config, "percentage"), expiry_days)
    if policy_type in FIXED_AMOUNT_TYPES:
        return FixedAmountPolicy(policy_type, _number(config, "amount"), expiry_days)
    if policy_type == POINT_BASED:
        return PointPolicy(
            points_per_rupee=_number(config, "pointsPerRupee"),
            rupees_per_point=_number(config, "rupeesPerPoint"),
            expiry_days=expiry_days,
        )
    if policy_type == CUSTOM:
        return CustomPolicy(rules=config.get("rules", ""), expiry_days=expiry_days)
    if policy_type == NONE:
        return NoRewardPolicy(expiry_days=expiry_days)
    raise ValueError(f"Invalid reward policy type: {policy_type}")


def policy_from_record(record: dict) -> RewardPolicy:
    """Stored rows of non-expiring types never carry an expiry into evaluation."""
    policy_type = record["type"]
    expiry = (record.get("expiry") or None) if policy_type in EXPIRING_POLICY_TYPES else None
    return build_policy(policy_type, record.get("config"), expiry)
