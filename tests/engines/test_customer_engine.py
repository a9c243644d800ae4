"""
Rewardify Customer Engine Tests
===============================
Profile validation, vendor-scoped CRUD and reward ledger views.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.time import FixedClock

NOW = datetime(2026, 5, 10, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store(clock):
    from core.vendor_store.memory import InMemoryVendorStore
    return InMemoryVendorStore(clock=clock)


@pytest.fixture
def vendor(store):
    return store.add_vendor(name="Asha")


@pytest.fixture
def service(store, clock):
    from engines.customer.services import CustomerService
    return CustomerService(store=store, clock=clock)


def _profile(phone="9000000001", **kwargs):
    from engines.customer.commands import CustomerProfileRequest
    return CustomerProfileRequest(phone=phone, **kwargs)


class TestCustomerProfileRequest:
    def test_phone_required(self):
        with pytest.raises(ValueError):
            _profile(phone="")

    def test_invalid_gender(self):
        with pytest.raises(ValueError):
            _profile(gender="X")

    def test_invalid_email(self):
        with pytest.raises(ValueError):
            _profile(email="nobody")

    def test_from_payload_blank_fields(self):
        from engines.customer.commands import CustomerProfileRequest
        req = CustomerProfileRequest.from_payload(
            {"phone": "9000000001", "name": "", "email": "", "gender": "", "taxNumber": "GST9"}
        )
        assert req.name is None
        assert req.email is None
        assert req.gender == "NA"
        assert req.tax_number == "GST9"


class TestCustomerCrud:
    def test_create(self, service, vendor):
        result = service.create_customer(vendor["id"], _profile(name="Ravi", gender="MALE"))
        customer = result["customer"]
        assert customer["name"] == "Ravi"
        assert customer["rewards"] == {}
        assert customer["vendor_id"] == vendor["id"]

    def test_duplicate_phone_rejected(self, service, vendor):
        service.create_customer(vendor["id"], _profile())
        result = service.create_customer(vendor["id"], _profile())
        assert result["rejected"].code == "DUPLICATE_CUSTOMER"

    def test_same_phone_other_vendor_allowed(self, service, store, vendor):
        other = store.add_vendor(name="Other")
        service.create_customer(vendor["id"], _profile())
        assert "customer" in service.create_customer(other["id"], _profile())

    def test_update_keeps_ledger(self, service, store, vendor):
        customer = service.create_customer(vendor["id"], _profile())["customer"]
        store.write_customer_rewards(customer["id"], {vendor["id"]: [{"type": "FIXED_CREDIT", "amount": 5}]})
        result = service.update_customer(vendor["id"], customer["id"], _profile(name="Ravi K"))
        assert result["customer"]["name"] == "Ravi K"
        assert result["customer"]["rewards"][vendor["id"]][0]["amount"] == 5

    def test_update_to_taken_phone_rejected(self, service, vendor):
        service.create_customer(vendor["id"], _profile(phone="1"))
        second = service.create_customer(vendor["id"], _profile(phone="2"))["customer"]
        result = service.update_customer(vendor["id"], second["id"], _profile(phone="1"))
        assert result["rejected"].code == "DUPLICATE_CUSTOMER"

    def test_update_foreign_rejected(self, service, store, vendor):
        other = store.add_vendor(name="Other")
        customer = service.create_customer(other["id"], _profile())["customer"]
        result = service.update_customer(vendor["id"], customer["id"], _profile())
        assert result["rejected"].code == "CUSTOMER_NOT_FOUND"

    def test_delete(self, service, store, vendor):
        customer = service.create_customer(vendor["id"], _profile())["customer"]
        assert service.delete_customer(vendor["id"], customer["id"]) == {"deleted": customer["id"]}
        assert store.get_customer(customer["id"]) is None

    def test_list_scoped(self, service, store, vendor, clock):
        service.create_customer(vendor["id"], _profile(phone="1"))
        clock.advance(seconds=1)
        service.create_customer(vendor["id"], _profile(phone="2"))
        other = store.add_vendor(name="Other")
        service.create_customer(other["id"], _profile(phone="3"))
        assert [c["phone"] for c in service.list_customers(vendor["id"])] == ["2", "1"]

    def test_get_unknown(self, service, vendor):
        assert service.get_customer(vendor["id"], "missing")["rejected"].code == "CUSTOMER_NOT_FOUND"


class TestRewardViews:
    def test_history_normalizes_legacy_bucket(self):
        from engines.customer.services import reward_history
        customer = {"rewards": {"v1": {"type": "FIXED_CREDIT", "amount": 10}}}
        assert reward_history(customer, "v1") == [{"type": "FIXED_CREDIT", "amount": 10}]
        assert reward_history(customer, "v2") == []

    def test_available_skips_expired(self):
        from engines.customer.services import available_rewards
        customer = {"rewards": {"v1": [
            {"type": "FIXED_CREDIT", "amount": 10, "expiresAt": (NOW + timedelta(days=1)).isoformat()},
            {"type": "FIXED_CREDIT", "amount": 5, "expiresAt": (NOW - timedelta(days=1)).isoformat()},
            {"type": "POINT_BASED", "amount": 40, "expiresAt": (NOW + timedelta(days=9)).isoformat()},
            {"type": "PERCENTAGE_DISCOUNT", "amount": 3, "expiresAt": None},
        ]}}
        assert available_rewards(customer, "v1", NOW) == {
            "FIXED_CREDIT": 10,
            "POINT_BASED": 40,
            "PERCENTAGE_DISCOUNT": 3,
        }

    def test_get_rewards(self, service, store, vendor):
        customer = service.create_customer(vendor["id"], _profile())["customer"]
        entry = {"type": "FIXED_CREDIT", "amount": 7, "expiresAt": (NOW + timedelta(days=3)).isoformat()}
        store.write_customer_rewards(customer["id"], {vendor["id"]: [entry]})
        result = service.get_rewards(vendor["id"], customer["id"])
        assert result == {
            "customer_id": customer["id"],
            "history": [entry],
            "available": {"FIXED_CREDIT": 7},
        }
