"""
Rewardify Rewards Engine — Commands
===================================
Reward policy configuration as submitted from the vendor settings form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from engines.rewards.policies import (
    CUSTOM,
    DEFAULT_EXPIRY_DAYS,
    EXPIRING_POLICY_TYPES,
    VALID_POLICY_TYPES,
    RewardPolicy,
    build_policy,
)


@dataclass(frozen=True)
class ConfigureRewardPolicyRequest:
    """
    Configure or replace a vendor's reward policy.

    `config` is the raw form bag; only the keys relevant to
    `policy_type` survive into the stored policy. `expiry` is honoured
    for expiring types (falling back to the vendor default) and dropped
    for the rest.
    """
    policy_type: str
    config: dict = field(default_factory=dict)
    expiry: Optional[int] = None

    def __post_init__(self):
        if self.policy_type not in VALID_POLICY_TYPES:
            raise ValueError(f"Invalid policy_type: {self.policy_type}")
        if not isinstance(self.config, dict):
            raise ValueError("config must be an object.")
        if self.expiry is not None:
            if isinstance(self.expiry, bool) or not isinstance(self.expiry, int):
                raise ValueError("expiry must be an integer number of days.")
            if self.expiry < 0:
                raise ValueError("expiry must be >= 0.")
        rules = self.config.get("rules")
        if self.policy_type == CUSTOM and rules is not None and not isinstance(rules, str):
            raise ValueError("rules must be a string.")

    def resolved_expiry(self, default_expiry_days: int = DEFAULT_EXPIRY_DAYS) -> Optional[int]:
        if self.policy_type not in EXPIRING_POLICY_TYPES:
            return None
        # 0 means "not set" on the settings form.
        return self.expiry or default_expiry_days

    def to_policy(self, default_expiry_days: int = DEFAULT_EXPIRY_DAYS) -> RewardPolicy:
        return build_policy(
            self.policy_type,
            self.config,
            self.resolved_expiry(default_expiry_days),
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ConfigureRewardPolicyRequest":
        return cls(
            policy_type=payload["type"],
            config=payload.get("config") or {},
            expiry=payload.get("expiry"),
        )
