"""
Rewardify Rewards Engine Tests
==============================
Policy evaluation, policy configuration and the append-only customer
reward ledger.

Tests cover:
- Variant validation and evaluation
- calculate_rewards for every policy type
- Ledger append, legacy normalization and non-mutation
- Policy configuration (expiry rules, replacement)
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from core.time import FixedClock

NOW = datetime(2026, 2, 20, 10, 0, 0, tzinfo=timezone.utc)
VENDOR = str(uuid.uuid4())
OTHER_VENDOR = str(uuid.uuid4())


class RecordingStore:
    """Minimal reward store that records every write."""

    def __init__(self, policy=None, customers=None):
        self.policy = policy
        self.customers = customers or {}
        self.writes = []

    def find_active_policy(self, vendor_id):
        if self.policy is None or not self.policy.get("is_active", True):
            return None
        return copy.deepcopy(self.policy)

    def get_reward_policy(self, vendor_id):
        return copy.deepcopy(self.policy)

    def save_reward_policy(self, vendor_id, record):
        self.writes.append(("policy", vendor_id, record))
        self.policy = copy.deepcopy(record)
        return copy.deepcopy(record)

    def read_customer(self, customer_id):
        return copy.deepcopy(self.customers[customer_id])

    def write_customer_rewards(self, customer_id, rewards):
        self.writes.append(("customer", customer_id, rewards))
        self.customers[customer_id]["rewards"] = copy.deepcopy(rewards)

    def write_transaction_reward(self, transaction_id, reward):
        self.writes.append(("transaction", transaction_id, reward))


def _policy(policy_type, config=None, expiry=None, is_active=True):
    return {"type": policy_type, "config": config or {}, "expiry": expiry, "is_active": is_active}


def _svc(store, clock=None):
    from engines.rewards.services import RewardService
    return RewardService(store=store, clock=clock or FixedClock(NOW))


def _customer(rewards=None):
    return {"id": "cust-1", "phone": "9000000001", "rewards": rewards if rewards is not None else {}}


# ══════════════════════════════════════════════════════════════
# POLICY VARIANTS
# ══════════════════════════════════════════════════════════════

class TestPolicyVariants:
    def test_percentage_rejects_over_100(self):
        from engines.rewards.policies import PercentagePolicy
        with pytest.raises(ValueError):
            PercentagePolicy("PERCENTAGE_DISCOUNT", 120)

    def test_percentage_rejects_wrong_type(self):
        from engines.rewards.policies import PercentagePolicy
        with pytest.raises(ValueError):
            PercentagePolicy("FIXED_CREDIT", 10, 30)

    def test_fixed_rejects_negative_amount(self):
        from engines.rewards.policies import FixedAmountPolicy
        with pytest.raises(ValueError):
            FixedAmountPolicy("FIXED_DISCOUNT", -5)

    def test_discount_types_cannot_expire(self):
        from engines.rewards.policies import FixedAmountPolicy
        with pytest.raises(ValueError, match="do not expire"):
            FixedAmountPolicy("FLAT_DISCOUNT", 10, expiry_days=30)

    def test_expiry_must_be_positive(self):
        from engines.rewards.policies import PointPolicy
        with pytest.raises(ValueError):
            PointPolicy(points_per_rupee=1, rupees_per_point=1, expiry_days=0)

    def test_build_policy_missing_numbers_default_to_zero(self):
        from engines.rewards.policies import build_policy
        policy = build_policy("POINT_BASED", {}, 30)
        assert policy.points_per_rupee == 0
        assert policy.rupees_per_point == 0

    def test_build_policy_unknown_type(self):
        from engines.rewards.policies import build_policy
        with pytest.raises(ValueError):
            build_policy("BOGUS", {})

    def test_stored_expiry_on_discount_type_is_ignored(self):
        from engines.rewards.policies import policy_from_record
        policy = policy_from_record(_policy("PERCENTAGE_DISCOUNT", {"percentage": 5}, expiry=30))
        assert policy.expiry_days is None

    def test_percentage_description(self):
        from engines.rewards.policies import PercentagePolicy
        outcome = PercentagePolicy("PERCENTAGE_CREDIT", 12.5, 30).evaluate(200)
        assert outcome.description == "12.5% store credit"
        assert outcome.metadata == {"percentage": 12.5}

    def test_fixed_description_uses_rupee_symbol(self):
        from engines.rewards.policies import FixedAmountPolicy
        outcome = FixedAmountPolicy("FIXED_DISCOUNT", 50).evaluate(10)
        assert outcome.description == "₹50 instant discount"


# ══════════════════════════════════════════════════════════════
# CALCULATE REWARDS
# ══════════════════════════════════════════════════════════════

class TestCalculateRewards:
    def test_absent_policy_is_none(self):
        result = _svc(RecordingStore()).calculate_rewards(VENDOR, 500, "tx-1")
        assert result.reward_amount == 0
        assert result.reward_type == "NONE"
        assert result.description == "No rewards applicable"
        assert result.expires_at is None

    def test_none_policy_is_none(self):
        store = RecordingStore(_policy("NONE"))
        result = _svc(store).calculate_rewards(VENDOR, 500, "tx-1")
        assert result.reward_amount == 0
        assert result.reward_type == "NONE"

    def test_inactive_policy_is_none(self):
        store = RecordingStore(_policy("PERCENTAGE_DISCOUNT", {"percentage": 10}, is_active=False))
        assert _svc(store).calculate_rewards(VENDOR, 1000).reward_type == "NONE"

    def test_percentage_discount(self):
        store = RecordingStore(_policy("PERCENTAGE_DISCOUNT", {"percentage": 10}))
        result = _svc(store).calculate_rewards(VENDOR, 1000, "tx-1")
        assert result.reward_amount == 100
        assert result.reward_type == "PERCENTAGE_DISCOUNT"
        assert result.description == "10% instant discount"
        assert result.expires_at is None
        assert result.transaction_id == "tx-1"

    def test_fixed_credit_expires(self):
        store = RecordingStore(_policy("FIXED_CREDIT", {"amount": 50}, expiry=30))
        for total in (0, 10, 99999):
            result = _svc(store).calculate_rewards(VENDOR, total)
            assert result.reward_amount == 50
            assert result.expires_at == NOW + timedelta(days=30)
            assert result.description == "₹50 store credit"

    def test_point_based(self):
        store = RecordingStore(
            _policy("POINT_BASED", {"pointsPerRupee": 0.5, "rupeesPerPoint": 2}, expiry=90)
        )
        result = _svc(store).calculate_rewards(VENDOR, 200)
        assert result.reward_amount == 100
        assert result.description == "100 points earned"
        assert result.metadata == {"pointsPerRupee": 0.5, "rupeesPerPoint": 2}

    def test_no_rounding(self):
        store = RecordingStore(_policy("PERCENTAGE_CREDIT", {"percentage": 3}, expiry=10))
        result = _svc(store).calculate_rewards(VENDOR, 333.33)
        assert result.reward_amount == pytest.approx(9.9999)

    def test_custom_invalid_rules_fail_soft(self, caplog):
        store = RecordingStore(_policy("CUSTOM", {"rules": "{not json"}, expiry=30))
        with caplog.at_level("WARNING", logger="rewardify.rewards"):
            result = _svc(store).calculate_rewards(VENDOR, 1000)
        assert result.reward_amount == 0
        assert result.description == "Invalid custom rules"
        assert "Invalid custom reward rules" in caplog.text

    def test_custom_valid_rules_grant_nothing(self):
        store = RecordingStore(_policy("CUSTOM", {"rules": '{"tier": "gold"}'}, expiry=30))
        result = _svc(store).calculate_rewards(VENDOR, 1000)
        assert result.reward_amount == 0
        assert result.description == "Custom reward applied"
        assert result.metadata == {"rules": {"tier": "gold"}}
        assert not result.grants_reward

    def test_custom_non_string_rules_fail_soft(self, caplog):
        store = RecordingStore(_policy("CUSTOM", {"rules": {"tier": 1}}, expiry=30))
        with caplog.at_level("WARNING", logger="rewardify.rewards"):
            result = _svc(store).calculate_rewards(VENDOR, 1000, "tx-1")
        assert result.reward_amount == 0
        assert result.description == "Invalid custom rules"
        assert result.transaction_id == "tx-1"

    @pytest.mark.parametrize("stored", [
        _policy("PERCENTAGE_CREDIT", {"percentage": 150}, expiry=30),
        _policy("FIXED_CREDIT", {"amount": "50"}, expiry=30),
        _policy("POINT_BASED", {"pointsPerRupee": -1}, expiry=30),
    ])
    def test_unusable_stored_policy_grants_nothing(self, stored, caplog):
        with caplog.at_level("WARNING", logger="rewardify.rewards"):
            result = _svc(RecordingStore(stored)).calculate_rewards(VENDOR, 1000, "tx-1")
        assert result.reward_amount == 0
        assert result.reward_type == "NONE"
        assert result.transaction_id == "tx-1"
        assert "Unusable reward policy" in caplog.text

        assert not result.grants_reward

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            _svc(RecordingStore()).calculate_rewards(VENDOR, -1)

    def test_calculate_never_writes(self):
        store = RecordingStore(
            _policy("FIXED_CREDIT", {"amount": 50}, expiry=30),
            customers={"cust-1": _customer()},
        )
        _svc(store).calculate_rewards(VENDOR, 100, "tx-1")
        assert store.writes == []


# ══════════════════════════════════════════════════════════════
# LEDGER
# ══════════════════════════════════════════════════════════════

class TestLedger:
    def test_normalize_bucket_shapes(self):
        from engines.rewards.ledger import normalize_bucket
        assert normalize_bucket(None) == []
        assert normalize_bucket({"amount": 1}) == [{"amount": 1}]
        assert normalize_bucket([{"amount": 1}]) == [{"amount": 1}]
        with pytest.raises(ValueError):
            normalize_bucket("garbage")

    def test_append_entry_does_not_mutate_input(self):
        from engines.rewards.ledger import append_entry
        original = {VENDOR: [{"amount": 1}]}
        updated = append_entry(original, VENDOR, {"amount": 2})
        assert original == {VENDOR: [{"amount": 1}]}
        assert updated == {VENDOR: [{"amount": 1}, {"amount": 2}]}

    def test_build_entry_shape(self):
        from engines.rewards.ledger import build_entry
        entry = build_entry(
            reward_type="FIXED_CREDIT",
            amount=50,
            metadata={"amount": 50},
            transaction_id="tx-1",
            expires_at=NOW + timedelta(days=30),
            now=NOW,
        )
        assert entry == {
            "type": "FIXED_CREDIT",
            "amount": 50,
            "metadata": {"amount": 50},
            "transactionId": "tx-1",
            "expiresAt": (NOW + timedelta(days=30)).isoformat(),
            "lastUpdated": NOW.isoformat(),
        }


class TestUpdateCustomerRewards:
    def _result(self, amount=50, reward_type="FIXED_CREDIT"):
        from engines.rewards.services import RewardCalculationResult
        return RewardCalculationResult(
            reward_amount=amount,
            reward_type=reward_type,
            description="x",
            expires_at=NOW + timedelta(days=30),
            metadata={"amount": amount},
            transaction_id="tx-1",
        )

    def test_append_only_law(self):
        store = RecordingStore(customers={"cust-1": _customer()})
        svc = _svc(store)
        svc.update_customer_rewards(_customer(), VENDOR, self._result())
        assert len(store.customers["cust-1"]["rewards"][VENDOR]) == 1
        svc.update_customer_rewards(_customer(), VENDOR, self._result())
        assert len(store.customers["cust-1"]["rewards"][VENDOR]) == 2
        svc.update_customer_rewards(_customer(), VENDOR, self._result(amount=0))
        assert len(store.customers["cust-1"]["rewards"][VENDOR]) == 2

    def test_zero_amount_writes_nothing(self):
        store = RecordingStore(customers={"cust-1": _customer()})
        _svc(store).update_customer_rewards(_customer(), VENDOR, self._result(amount=0))
        assert store.writes == []

    def test_none_type_writes_nothing(self):
        from engines.rewards.services import no_reward
        store = RecordingStore(customers={"cust-1": _customer()})
        _svc(store).update_customer_rewards(_customer(), VENDOR, no_reward("tx-1"))
        assert store.writes == []

    def test_legacy_single_object_is_normalized(self):
        legacy = {"type": "FIXED_CREDIT", "amount": 20, "transactionId": "old"}
        store = RecordingStore(customers={"cust-1": _customer({VENDOR: legacy})})
        _svc(store).update_customer_rewards(_customer(), VENDOR, self._result())
        bucket = store.customers["cust-1"]["rewards"][VENDOR]
        assert isinstance(bucket, list)
        assert len(bucket) == 2
        assert bucket[0] == legacy
        assert bucket[1]["transactionId"] == "tx-1"

    def test_other_vendor_buckets_untouched(self):
        theirs = [{"type": "PERCENTAGE_CREDIT", "amount": 5}]
        store = RecordingStore(customers={"cust-1": _customer({OTHER_VENDOR: theirs})})
        _svc(store).update_customer_rewards(_customer(), VENDOR, self._result())
        rewards = store.customers["cust-1"]["rewards"]
        assert rewards[OTHER_VENDOR] == theirs
        assert len(rewards[VENDOR]) == 1

    def test_appends_to_stored_ledger_not_stale_copy(self):
        stored = [{"type": "FIXED_CREDIT", "amount": 1}]
        store = RecordingStore(customers={"cust-1": _customer({VENDOR: stored})})
        # Caller's copy predates the stored entry.
        _svc(store).update_customer_rewards(_customer({}), VENDOR, self._result())
        assert len(store.customers["cust-1"]["rewards"][VENDOR]) == 2

    def test_entry_records_now(self):
        store = RecordingStore(customers={"cust-1": _customer()})
        _svc(store).update_customer_rewards(_customer(), VENDOR, self._result())
        entry = store.customers["cust-1"]["rewards"][VENDOR][0]
        assert entry["lastUpdated"] == NOW.isoformat()
        assert entry["expiresAt"] == (NOW + timedelta(days=30)).isoformat()


class TestApplyTransactionRewards:
    def test_writes_transaction_and_ledger(self):
        store = RecordingStore(
            _policy("PERCENTAGE_CREDIT", {"percentage": 10}, expiry=30),
            customers={"cust-1": _customer()},
        )
        result = _svc(store).apply_transaction_rewards(VENDOR, _customer(), 500, "tx-9")
        assert result.reward_amount == 50
        kinds = [w[0] for w in store.writes]
        assert kinds == ["transaction", "customer"]
        assert store.writes[0][2] == {
            "amount": 50,
            "type": "PERCENTAGE_CREDIT",
            "description": "10% store credit",
            "expiresAt": (NOW + timedelta(days=30)).isoformat(),
        }

    def test_no_policy_no_writes(self):
        store = RecordingStore(customers={"cust-1": _customer()})
        result = _svc(store).apply_transaction_rewards(VENDOR, _customer(), 500, "tx-9")
        assert result.reward_type == "NONE"
        assert store.writes == []


# ══════════════════════════════════════════════════════════════
# POLICY CONFIGURATION
# ══════════════════════════════════════════════════════════════

class TestConfigureRewardPolicyRequest:
    def test_invalid_type(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        with pytest.raises(ValueError):
            ConfigureRewardPolicyRequest(policy_type="MYSTERY")

    def test_negative_expiry(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        with pytest.raises(ValueError):
            ConfigureRewardPolicyRequest(policy_type="FIXED_CREDIT", expiry=-1)

    def test_custom_rules_must_be_text(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        with pytest.raises(ValueError):
            ConfigureRewardPolicyRequest(policy_type="CUSTOM", config={"rules": {"tier": 1}})

    def test_from_payload(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        req = ConfigureRewardPolicyRequest.from_payload(
            {"type": "POINT_BASED", "config": {"pointsPerRupee": 1}, "expiry": 60}
        )
        assert req.policy_type == "POINT_BASED"
        assert req.resolved_expiry() == 60

    def test_discount_expiry_forced_null(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        req = ConfigureRewardPolicyRequest(policy_type="PERCENTAGE_DISCOUNT", expiry=30)
        assert req.resolved_expiry() is None

    def test_credit_expiry_defaults(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        req = ConfigureRewardPolicyRequest(policy_type="FIXED_CREDIT", config={"amount": 5})
        assert req.resolved_expiry() == 365
        assert req.resolved_expiry(90) == 90


class TestConfigurePolicy:
    def test_stores_normalized_record(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        store = RecordingStore()
        saved = _svc(store).configure_policy(
            VENDOR,
            ConfigureRewardPolicyRequest(
                policy_type="PERCENTAGE_CREDIT",
                config={"percentage": 10, "amount": 99},
                expiry=30,
            ),
        )
        assert saved == {
            "type": "PERCENTAGE_CREDIT",
            "name": "PERCENTAGE_CREDIT Policy",
            "config": {"percentage": 10},
            "expiry": 30,
            "expires_at": NOW + timedelta(days=30),
            "is_active": True,
        }

    def test_discount_policy_has_no_expiry(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        store = RecordingStore()
        saved = _svc(store).configure_policy(
            VENDOR,
            ConfigureRewardPolicyRequest(policy_type="FLAT_DISCOUNT", config={"amount": 20}, expiry=15),
        )
        assert saved["expiry"] is None
        assert saved["expires_at"] is None

    def test_default_expiry_from_service(self):
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        from engines.rewards.services import RewardService
        store = RecordingStore()
        svc = RewardService(store=store, clock=FixedClock(NOW), default_expiry_days=45)
        saved = svc.configure_policy(VENDOR, ConfigureRewardPolicyRequest(policy_type="CUSTOM"))
        assert saved["expiry"] == 45
        assert saved["config"] == {"rules": ""}

    def test_second_configure_replaces(self):
        from core.vendor_store.memory import InMemoryVendorStore
        from engines.rewards.commands import ConfigureRewardPolicyRequest
        store = InMemoryVendorStore(clock=FixedClock(NOW))
        svc = _svc(store)
        first = svc.configure_policy(
            VENDOR, ConfigureRewardPolicyRequest(policy_type="FIXED_CREDIT", config={"amount": 10}, expiry=7),
        )
        second = svc.configure_policy(
            VENDOR, ConfigureRewardPolicyRequest(policy_type="PERCENTAGE_DISCOUNT", config={"percentage": 5}),
        )
        assert second["id"] == first["id"]
        stored = svc.get_policy(VENDOR)
        assert stored["type"] == "PERCENTAGE_DISCOUNT"
        assert stored["config"] == {"percentage": 5}
        assert stored["expiry"] is None
        assert svc.calculate_rewards(VENDOR, 200).reward_amount == 10

    def test_get_policy_absent(self):
        assert _svc(RecordingStore()).get_policy(VENDOR) is None
