"""
HarborQuote Django Adapter Views
================================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import (
    CatalogPricingRequest,
    PricingEvaluateRequest,
    QuoteStepsRequest,
    QuoteSummaryRequest,
)
from core.http_api.errors import error_response
from core.http_api.handlers import (
    post_pricing_catalog,
    post_pricing_evaluate,
    post_quote_steps,
    post_quote_summary,
)
from engines.catalog.models import as_decimal, catalog_item_from_record
from engines.promotion.records import load_promotions, load_rules, parse_boundary
from engines.quote.state import WizardState


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _list_field(body: dict[str, Any], field_name: str) -> list[Any]:
    value = body.get(field_name, [])
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list.")
    for entry in value:
        if not isinstance(entry, dict):
            raise ValueError(f"{field_name} entries must be objects.")
    return value


def _object_field(body: dict[str, Any], field_name: str) -> dict[str, Any]:
    if field_name not in body:
        raise ValueError(f"{field_name} is required.")
    value = body[field_name]
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object.")
    return value


def _parse_now(body: dict[str, Any]) -> datetime | None:
    return parse_boundary(body.get("now"), end_of_day=False)


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _dispatch_post(handler, contract_factory, request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        contract = contract_factory(body)
    except (ValueError, KeyError, TypeError) as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)

    payload = handler(contract, build_dependencies())
    return JsonResponse(payload, status=200 if payload["ok"] else 422)


def _pricing_evaluate_contract_factory(body: dict[str, Any]) -> PricingEvaluateRequest:
    return PricingEvaluateRequest(
        item=catalog_item_from_record(_object_field(body, "item")),
        promotions=tuple(load_promotions(_list_field(body, "promotions"))),
        rules=tuple(load_rules(_list_field(body, "rules"))),
        now=_parse_now(body),
    )


def _catalog_pricing_contract_factory(body: dict[str, Any]) -> CatalogPricingRequest:
    return CatalogPricingRequest(
        items=tuple(
            catalog_item_from_record(record) for record in _list_field(body, "items")
        ),
        promotions=tuple(load_promotions(_list_field(body, "promotions"))),
        rules=tuple(load_rules(_list_field(body, "rules"))),
        now=_parse_now(body),
    )


def _quote_steps_contract_factory(body: dict[str, Any]) -> QuoteStepsRequest:
    return QuoteStepsRequest(state=WizardState.from_dict(_object_field(body, "state")))


def _quote_summary_contract_factory(body: dict[str, Any]) -> QuoteSummaryRequest:
    return QuoteSummaryRequest(
        state=WizardState.from_dict(_object_field(body, "state")),
        accessory_total=as_decimal(body.get("accessory_total", 0), "accessory_total"),
        tax_region=body.get("tax_region"),
    )


@csrf_exempt
def pricing_evaluate_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_post(
        post_pricing_evaluate, _pricing_evaluate_contract_factory, request
    )


@csrf_exempt
def pricing_catalog_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_post(
        post_pricing_catalog, _catalog_pricing_contract_factory, request
    )


@csrf_exempt
def quote_steps_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_post(post_quote_steps, _quote_steps_contract_factory, request)


@csrf_exempt
def quote_summary_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_post(post_quote_summary, _quote_summary_contract_factory, request)
