from __future__ import annotations

import uuid

import pytest

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse, VendorScope
from core.http_api.errors import (
    error_response,
    map_rejection_reason,
    rejection_response,
    rejection_status,
    success_response,
)


def _reason(code: str) -> RejectionReason:
    return RejectionReason(code=code, message="refused", policy_name="some_policy")


class TestEnvelope:
    def test_success_envelope(self):
        assert success_response({"x": 1}) == {"ok": True, "data": {"x": 1}}

    def test_success_envelope_with_meta(self):
        body = success_response([], meta={"count": 0})
        assert body["meta"] == {"count": 0}

    def test_error_envelope(self):
        body = error_response(code="INVALID_REQUEST", message="bad")
        assert body == {
            "ok": False,
            "error": {"code": "INVALID_REQUEST", "message": "bad", "details": {}},
        }

    def test_failed_response_needs_error(self):
        with pytest.raises(ValueError):
            HttpApiResponse(ok=False).to_dict()

    def test_error_body_copies_details(self):
        details = {"a": 1}
        body = HttpApiErrorBody(code="X", message="y", details=details).to_dict()
        body["details"]["a"] = 2
        assert details["a"] == 1


class TestRejectionMapping:
    def test_maps_code_and_policy(self):
        error = map_rejection_reason(_reason(ReasonCode.INVALID_REFERENCE))
        assert error.code == "INVALID_REFERENCE"
        assert error.details["policy_name"] == "some_policy"
        assert error.details["message_key"] == "rejection.invalid_reference"

    def test_rejection_response_is_not_ok(self):
        body = rejection_response(_reason(ReasonCode.CUSTOMER_NOT_FOUND))
        assert body["ok"] is False
        assert body["error"]["code"] == "CUSTOMER_NOT_FOUND"

    @pytest.mark.parametrize(
        "code, status",
        [
            (ReasonCode.TRANSACTION_NOT_FOUND, 404),
            (ReasonCode.GIFT_CARD_NOT_FOUND, 404),
            (ReasonCode.UNAUTHORIZED, 401),
            (ReasonCode.DUPLICATE_CUSTOMER, 400),
            (ReasonCode.INVALID_REFERENCE, 400),
        ],
    )
    def test_status_by_code(self, code, status):
        assert rejection_status(_reason(code)) == status


class TestRejectionReason:
    def test_requires_all_fields(self):
        with pytest.raises(ValueError):
            RejectionReason(code="", message="m", policy_name="p")
        with pytest.raises(ValueError):
            RejectionReason(code="C", message="", policy_name="p")


class TestVendorScope:
    def test_requires_uuid(self):
        with pytest.raises(ValueError):
            VendorScope(vendor_id="not-a-uuid")

    def test_accepts_uuid(self):
        vendor_id = uuid.uuid4()
        assert VendorScope(vendor_id=vendor_id).vendor_id == vendor_id
