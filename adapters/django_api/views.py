"""
Rewardify Django Adapter Views
==============================
JSON views over the engine services.

Every view resolves the calling vendor first, then parses the request
into an engine command. Outcomes map to status codes as follows:
- ValueError / missing field while parsing -> 400 INVALID_REQUEST
- service rejection -> 404 / 401 / 400 by rejection code
- any exception raised by a service -> 500 INTERNAL_ERROR (logged)
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Callable

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies, resolve_vendor
from core.commands.rejection import RejectionReason
from core.http_api.errors import (
    error_response,
    rejection_response,
    rejection_status,
    success_response,
)
from engines.customer.commands import CustomerProfileRequest
from engines.giftcard.commands import GiftCardRequest
from engines.promotion.commands import PromotionRequest
from engines.rewards.commands import ConfigureRewardPolicyRequest
from engines.transaction.commands import RecordTransactionRequest

logger = logging.getLogger("rewardify.http")

Parser = Callable[..., tuple]
Runner = Callable[..., Any]
Route = tuple[Parser, Runner]


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _rejection(reason: RejectionReason) -> JsonResponse:
    return JsonResponse(rejection_response(reason), status=rejection_status(reason))


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _parse_uuid(value: Any, field_name: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except Exception as exc:
        raise ValueError(f"{field_name} must be a valid UUID.") from exc


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _record_id(request: HttpRequest, body: dict[str, Any] | None = None) -> uuid.UUID:
    raw = (body or {}).get("id", request.GET.get("id"))
    if raw is None:
        raise ValueError("id is required.")
    return _parse_uuid(raw, "id")


def _dispatch(request: HttpRequest, route: Route, path_args: dict[str, Any]) -> HttpResponse:
    deps = build_dependencies()
    scope = resolve_vendor(request.headers, deps)
    if isinstance(scope, RejectionReason):
        return _rejection(scope)

    parse, run = route
    try:
        args = parse(request, **path_args)
    except KeyError as exc:
        return _json_error("INVALID_REQUEST", f"Missing field: {exc.args[0]}", status=400)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)

    try:
        result = run(deps, scope.vendor_id, *args)
    except Exception:
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return _json_error("INTERNAL_ERROR", "Internal server error.", status=500)

    if isinstance(result, HttpResponse):
        return result
    if isinstance(result, dict) and "rejected" in result:
        return _rejection(result["rejected"])
    return JsonResponse(success_response(result))


def _routed(routes: dict[str, Route]):
    """Build a view that dispatches on HTTP method."""

    @csrf_exempt
    def view(request: HttpRequest, **kwargs) -> HttpResponse:
        route = routes.get(request.method)
        if route is None:
            return _method_not_allowed()
        return _dispatch(request, route, kwargs)

    return view


# ── Request parsers ───────────────────────────────────────────

def _no_args(request, **path_args):
    return ()


def _query_id(request, **path_args):
    return (_record_id(request),)


def _body_id(request, **path_args):
    return (_record_id(request, _parse_json_body(request)),)


def _body_command(factory):
    def parse(request, **path_args):
        return (factory(_parse_json_body(request)),)
    return parse


def _id_and_body_command(factory):
    def parse(request, **path_args):
        body = _parse_json_body(request)
        return (_record_id(request, body), factory(body))
    return parse


def _invoice_args(request, reference: str):
    forwarded = request.headers.get("X-Forwarded-For")
    requester = {
        "ip": forwarded or request.headers.get("X-Real-Ip") or request.META.get("REMOTE_ADDR"),
        "user_agent": request.headers.get("User-Agent"),
    }
    return (reference, requester)


# ── Transactions ──────────────────────────────────────────────

def _list_transactions(deps, vendor_id):
    return {"transactions": deps.transactions.list_transactions(vendor_id)}


def _create_transaction(deps, vendor_id, command: RecordTransactionRequest):
    return deps.transactions.create_transaction(vendor_id, command)


def _update_transaction(deps, vendor_id, transaction_id, command: RecordTransactionRequest):
    return deps.transactions.update_transaction(vendor_id, transaction_id, command)


def _delete_transaction(deps, vendor_id, transaction_id):
    return deps.transactions.delete_transaction(vendor_id, transaction_id)


def _transaction_detail(deps, vendor_id, transaction_id):
    return deps.transactions.get_transaction_details(vendor_id, transaction_id)


# ── Reward policy ─────────────────────────────────────────────

def _get_policy(deps, vendor_id):
    return {"policy": deps.rewards.get_policy(vendor_id)}


def _configure_policy(deps, vendor_id, command: ConfigureRewardPolicyRequest):
    return {"policy": deps.rewards.configure_policy(vendor_id, command)}


# ── Customers ─────────────────────────────────────────────────

def _list_customers(deps, vendor_id):
    return {"customers": deps.customers.list_customers(vendor_id)}


def _create_customer(deps, vendor_id, command: CustomerProfileRequest):
    return deps.customers.create_customer(vendor_id, command)


def _update_customer(deps, vendor_id, customer_id, command: CustomerProfileRequest):
    return deps.customers.update_customer(vendor_id, customer_id, command)


def _delete_customer(deps, vendor_id, customer_id):
    return deps.customers.delete_customer(vendor_id, customer_id)


def _customer_rewards(deps, vendor_id, customer_id):
    return deps.customers.get_rewards(vendor_id, customer_id)


# ── Gift cards ────────────────────────────────────────────────

def _list_gift_cards(deps, vendor_id):
    return {"gift_cards": deps.gift_cards.list_gift_cards(vendor_id)}


def _create_gift_card(deps, vendor_id, command: GiftCardRequest):
    return deps.gift_cards.create_gift_card(vendor_id, command)


def _update_gift_card(deps, vendor_id, gift_card_id, command: GiftCardRequest):
    return deps.gift_cards.update_gift_card(vendor_id, gift_card_id, command)


def _delete_gift_card(deps, vendor_id, gift_card_id):
    return deps.gift_cards.delete_gift_card(vendor_id, gift_card_id)


# ── Promotions ────────────────────────────────────────────────

def _list_promotions(deps, vendor_id):
    return {"promotions": deps.promotions.list_promotions(vendor_id)}


def _create_promotion(deps, vendor_id, command: PromotionRequest):
    return deps.promotions.create_promotion(vendor_id, command)


def _update_promotion(deps, vendor_id, promotion_id, command: PromotionRequest):
    return deps.promotions.update_promotion(vendor_id, promotion_id, command)


def _delete_promotion(deps, vendor_id, promotion_id):
    return deps.promotions.delete_promotion(vendor_id, promotion_id)


# ── Overview & invoices ───────────────────────────────────────

def _overview(deps, vendor_id):
    return deps.reporting.overview(vendor_id)


def _invoice_pdf(deps, vendor_id, reference: str, requester: dict):
    result = deps.invoices.generate(vendor_id, reference, requester=requester)
    if "rejected" in result:
        return result
    response = HttpResponse(result["pdf"], content_type="application/pdf")
    response["Content-Disposition"] = f'inline; filename="invoice-{reference}.pdf"'
    response["Content-Length"] = str(len(result["pdf"]))
    return response


transactions_view = _routed({
    "GET": (_no_args, _list_transactions),
    "POST": (_body_command(RecordTransactionRequest.from_payload), _create_transaction),
})
transactions_update_view = _routed({
    "POST": (_id_and_body_command(RecordTransactionRequest.from_payload), _update_transaction),
})
transactions_delete_view = _routed({"POST": (_body_id, _delete_transaction)})
transactions_detail_view = _routed({"GET": (_query_id, _transaction_detail)})

reward_policy_view = _routed({
    "GET": (_no_args, _get_policy),
    "POST": (_body_command(ConfigureRewardPolicyRequest.from_payload), _configure_policy),
})

customers_view = _routed({
    "GET": (_no_args, _list_customers),
    "POST": (_body_command(CustomerProfileRequest.from_payload), _create_customer),
})
customers_update_view = _routed({
    "POST": (_id_and_body_command(CustomerProfileRequest.from_payload), _update_customer),
})
customers_delete_view = _routed({"POST": (_body_id, _delete_customer)})
customers_rewards_view = _routed({"GET": (_query_id, _customer_rewards)})

gift_cards_view = _routed({
    "GET": (_no_args, _list_gift_cards),
    "POST": (_body_command(GiftCardRequest.from_payload), _create_gift_card),
})
gift_cards_update_view = _routed({
    "POST": (_id_and_body_command(GiftCardRequest.from_payload), _update_gift_card),
})
gift_cards_delete_view = _routed({"POST": (_body_id, _delete_gift_card)})

promotions_view = _routed({
    "GET": (_no_args, _list_promotions),
    "POST": (_body_command(PromotionRequest.from_payload), _create_promotion),
})
promotions_update_view = _routed({
    "POST": (_id_and_body_command(PromotionRequest.from_payload), _update_promotion),
})
promotions_delete_view = _routed({"POST": (_body_id, _delete_promotion)})

overview_view = _routed({"GET": (_no_args, _overview)})
invoice_view = _routed({"GET": (_invoice_args, _invoice_pdf)})
