"""
Rewardify Gift Card Engine Tests
================================
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from core.time import FixedClock

NOW = datetime(2026, 6, 1, 0, 0, 0, tzinfo=timezone.utc)


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
    from engines.giftcard.services import GiftCardService
    return GiftCardService(store=store, clock=clock)


def _request(amount=500, validity_days=30, description="Diwali card", terms=None):
    from engines.giftcard.commands import GiftCardRequest
    return GiftCardRequest(
        amount=amount, description=description, validity_days=validity_days, terms=terms,
    )


class TestGiftCardRequest:
    @pytest.mark.parametrize("amount", [0, -10, True, "100"])
    def test_amount_must_be_positive_number(self, amount):
        with pytest.raises(ValueError):
            _request(amount=amount)

    @pytest.mark.parametrize("days", [0, 1.5, None])
    def test_validity_days(self, days):
        with pytest.raises(ValueError):
            _request(validity_days=days)

    def test_from_payload(self):
        from engines.giftcard.commands import GiftCardRequest
        req = GiftCardRequest.from_payload({"amount": 250, "validityDays": 7, "terms": ""})
        assert req.validity_days == 7
        assert req.description == ""
        assert req.terms is None


class TestGiftCardCode:
    def test_code_shape(self):
        from engines.giftcard.services import generate_gift_card_code
        code = generate_gift_card_code()
        assert re.fullmatch(r"[0-9A-F]{16}", code)

    def test_codes_differ(self):
        from engines.giftcard.services import generate_gift_card_code
        assert len({generate_gift_card_code() for _ in range(20)}) == 20


class TestGiftCardService:
    def test_create(self, service, vendor):
        card = service.create_gift_card(vendor["id"], _request())["gift_card"]
        assert re.fullmatch(r"[0-9A-F]{16}", card["code"])
        assert card["amount"] == 500
        assert card["expiration_date"] == NOW + timedelta(days=30)

    def test_custom_code_factory(self, store, vendor, clock):
        from engines.giftcard.services import GiftCardService
        svc = GiftCardService(store=store, clock=clock, code_factory=lambda: "CAFEBABE00000000")
        assert svc.create_gift_card(vendor["id"], _request())["gift_card"]["code"] == "CAFEBABE00000000"

    def test_update_recomputes_expiry_from_now(self, service, vendor, clock):
        card = service.create_gift_card(vendor["id"], _request())["gift_card"]
        clock.advance(days=10)
        updated = service.update_gift_card(
            vendor["id"], card["id"], _request(amount=800, validity_days=5),
        )["gift_card"]
        assert updated["amount"] == 800
        assert updated["code"] == card["code"]
        assert updated["expiration_date"] == NOW + timedelta(days=15)

    def test_update_foreign_rejected(self, service, store, vendor):
        other = store.add_vendor(name="Other")
        card = service.create_gift_card(other["id"], _request())["gift_card"]
        result = service.update_gift_card(vendor["id"], card["id"], _request())
        assert result["rejected"].code == "GIFT_CARD_NOT_FOUND"

    def test_delete(self, service, store, vendor):
        card = service.create_gift_card(vendor["id"], _request())["gift_card"]
        assert service.delete_gift_card(vendor["id"], card["id"]) == {"deleted": card["id"]}
        assert store.get_gift_card(card["id"]) is None

    def test_delete_unknown(self, service, vendor):
        assert service.delete_gift_card(vendor["id"], "nope")["rejected"].code == "GIFT_CARD_NOT_FOUND"

    def test_list_newest_first(self, service, vendor, clock):
        first = service.create_gift_card(vendor["id"], _request())["gift_card"]
        clock.advance(seconds=1)
        second = service.create_gift_card(vendor["id"], _request())["gift_card"]
        assert [c["id"] for c in service.list_gift_cards(vendor["id"])] == [second["id"], first["id"]]
