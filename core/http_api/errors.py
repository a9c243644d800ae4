"""
Rewardify HTTP API - Error Mapping
==================================
Stable transport error mapping for rejections and handler failures.
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import NOT_FOUND_CODES, ReasonCode, RejectionReason
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(
    data: Any,
    *,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data, meta=meta).to_dict()


def map_rejection_reason(reason: RejectionReason) -> HttpApiErrorBody:
    return HttpApiErrorBody(
        code=reason.code,
        message=reason.message,
        details={
            "policy_name": reason.policy_name,
            "message_key": f"rejection.{reason.code.lower()}",
        },
    )


def rejection_status(reason: RejectionReason) -> int:
    if reason.code in NOT_FOUND_CODES:
        return 404
    if reason.code == ReasonCode.UNAUTHORIZED:
        return 401
    return 400


def rejection_response(reason: RejectionReason) -> dict[str, Any]:
    return HttpApiResponse(ok=False, error=map_rejection_reason(reason)).to_dict()
