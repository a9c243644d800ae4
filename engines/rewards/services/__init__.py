"""
Rewardify Rewards Engine — Service Layer
========================================
Evaluates a vendor's active reward policy against a transaction total
and folds granted rewards into the customer's per-vendor ledger.

calculate_rewards() is a pure read. Writes happen only through
update_customer_rewards() and apply_transaction_rewards(), and only
for a positive reward amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol

from core.time import Clock, SystemClock, add_days, to_iso
from engines.rewards.commands import ConfigureRewardPolicyRequest
from engines.rewards.ledger import append_entry, build_entry
from engines.rewards.policies import (
    DEFAULT_EXPIRY_DAYS,
    NONE,
    NoRewardPolicy,
    policy_from_record,
)

logger = logging.getLogger("rewardify.rewards")


# ── Persistence Collaborator ──────────────────────────────────

class RewardStore(Protocol):
    def find_active_policy(self, vendor_id) -> Optional[dict]: ...

    def get_reward_policy(self, vendor_id) -> Optional[dict]: ...

    def save_reward_policy(self, vendor_id, record: dict) -> dict: ...

    def read_customer(self, customer_id) -> dict: ...

    def write_customer_rewards(self, customer_id, rewards: dict) -> None: ...

    def write_transaction_reward(self, transaction_id, reward: dict) -> None: ...


# ── Result Record ─────────────────────────────────────────────

@dataclass(frozen=True)
class RewardCalculationResult:
    reward_amount: float
    reward_type: str
    description: str
    expires_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)
    transaction_id: Optional[str] = None

    def __post_init__(self):
        if self.reward_amount < 0:
            raise ValueError("reward_amount must be >= 0.")

    @property
    def grants_reward(self) -> bool:
        return self.reward_type != NONE and self.reward_amount > 0

    def transaction_reward(self) -> dict:
        """Shape stored on Transaction.reward."""
        return {
            "amount": self.reward_amount,
            "type": self.reward_type,
            "description": self.description,
            "expiresAt": to_iso(self.expires_at),
        }

    def to_dict(self) -> dict:
        return {
            "reward_amount": self.reward_amount,
            "reward_type": self.reward_type,
            "description": self.description,
            "expires_at": to_iso(self.expires_at),
            "metadata": dict(self.metadata),
            "transaction_id": self.transaction_id,
        }


def no_reward(transaction_id: Optional[str] = None) -> RewardCalculationResult:
    return RewardCalculationResult(
        reward_amount=0,
        reward_type=NONE,
        description="No rewards applicable",
        transaction_id=transaction_id,
    )


# ── Service ───────────────────────────────────────────────────

class RewardService:
    """Reward policy engine. Persistence is delegated to the store."""

    def __init__(
        self,
        *,
        store: RewardStore,
        clock: Optional[Clock] = None,
        default_expiry_days: int = DEFAULT_EXPIRY_DAYS,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._default_expiry_days = default_expiry_days

    # -- policy settings ----------------------------------------------------

    def get_policy(self, vendor_id) -> Optional[dict]:
        return self._store.get_reward_policy(vendor_id)

    def configure_policy(self, vendor_id, request: ConfigureRewardPolicyRequest) -> dict:
        """Create or replace the vendor's single policy row."""
        policy = request.to_policy(self._default_expiry_days)
        now = self._clock.now_utc()
        record = {
            "type": policy.policy_type,
            "name": f"{policy.policy_type} Policy",
            "config": policy.to_config(),
            "expiry": policy.expiry_days,
            "expires_at": add_days(now, policy.expiry_days),
            "is_active": True,
        }
        saved = self._store.save_reward_policy(vendor_id, record)
        logger.info("Reward policy for vendor %s set to %s", vendor_id, policy.policy_type)
        return saved

    # -- evaluation ---------------------------------------------------------

    def calculate_rewards(
        self,
        vendor_id,
        total_amount: float,
        transaction_id: Optional[Any] = None,
    ) -> RewardCalculationResult:
        if total_amount < 0:
            raise ValueError("total_amount must be >= 0.")
        tx_id = str(transaction_id) if transaction_id is not None else None

        record = self._store.find_active_policy(vendor_id)
        if record is None:
            return no_reward(tx_id)
        try:
            policy = policy_from_record(record)
        except ValueError:
            logger.warning(
                "Unusable reward policy for vendor %s; granting no reward.", vendor_id,
                exc_info=True,
            )
            return no_reward(tx_id)
        if isinstance(policy, NoRewardPolicy):
            return no_reward(tx_id)

        outcome = policy.evaluate(total_amount)
        return RewardCalculationResult(
            reward_amount=outcome.amount,
            reward_type=policy.policy_type,
            description=outcome.description,
            expires_at=add_days(self._clock.now_utc(), policy.expiry_days),
            metadata=outcome.metadata,
            transaction_id=tx_id,
        )

    # -- ledger -------------------------------------------------------------

    def update_customer_rewards(
        self,
        customer: dict,
        vendor_id,
        result: RewardCalculationResult,
    ) -> None:
        if not result.grants_reward:
            return
        # Re-read so the append lands on the stored ledger, not a stale copy.
        current = self._store.read_customer(customer["id"])
        entry = build_entry(
            reward_type=result.reward_type,
            amount=result.reward_amount,
            metadata=result.metadata,
            transaction_id=result.transaction_id,
            expires_at=result.expires_at,
            now=self._clock.now_utc(),
        )
        ledger = append_entry(current.get("rewards"), vendor_id, entry)
        self._store.write_customer_rewards(customer["id"], ledger)
        logger.info(
            "Appended %s reward of %s to customer %s for vendor %s",
            result.reward_type, result.reward_amount, customer["id"], vendor_id,
        )

    def apply_transaction_rewards(
        self,
        vendor_id,
        customer: dict,
        total_amount: float,
        transaction_id,
    ) -> RewardCalculationResult:
        """Calculate, then stamp the transaction and extend the ledger."""
        result = self.calculate_rewards(vendor_id, total_amount, transaction_id)
        if result.grants_reward:
            self._store.write_transaction_reward(transaction_id, result.transaction_reward())
            self.update_customer_rewards(customer, vendor_id, result)
        return result
