"""
HarborQuote HTTP API - Framework-Agnostic Handlers
==================================================
Pure handler functions over contracts and injected dependencies.
Each returns a response envelope dict; none raise for bad input
that already passed contract validation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from core.http_api.contracts import (
    CatalogPricingRequest,
    PricingEvaluateRequest,
    QuoteStepsRequest,
    QuoteSummaryRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import error_response, success_response
from core.time.temporal import format_expiry
from engines.catalog.models import CatalogItem
from engines.promotion.models import PricingResult
from engines.promotion.services import evaluate, price_catalog
from engines.quote.guards import accessibility_map, next_step, visible_steps
from engines.quote.summary import compute_quote_totals

logger = logging.getLogger("harborquote.http")


def _resolve_now(requested: datetime | None, dependencies: HttpApiDependencies) -> datetime:
    return requested if requested is not None else dependencies.clock.now_utc()


def _serialize_priced_item(
    item: CatalogItem,
    pricing: PricingResult,
    now: datetime,
) -> dict[str, Any]:
    return {
        "item": item.to_dict(),
        "pricing": pricing.to_dict(),
        "expiry_label": (
            format_expiry(pricing.promo_ends_at, now)
            if pricing.promo_ends_at is not None
            else None
        ),
    }


def post_pricing_evaluate(
    request: PricingEvaluateRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    now = _resolve_now(request.now, dependencies)
    pricing = evaluate(request.item, request.promotions, request.rules, now)
    return success_response(
        _serialize_priced_item(request.item, pricing, now),
        meta={"evaluated_at": now.isoformat()},
    )


def post_pricing_catalog(
    request: CatalogPricingRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    now = _resolve_now(request.now, dependencies)
    priced = price_catalog(request.items, request.promotions, request.rules, now)
    return success_response(
        {
            "items": [_serialize_priced_item(item, pricing, now) for item, pricing in priced],
            "count": len(priced),
            "excluded": len(request.items) - len(priced),
        },
        meta={"evaluated_at": now.isoformat()},
    )


def post_quote_steps(
    request: QuoteStepsRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    state = request.state
    upcoming = next_step(state, state.current_step)
    return success_response(
        {
            "current_step": state.current_step,
            "next_step": int(upcoming) if upcoming is not None else None,
            "visible_steps": [int(step) for step in visible_steps(state)],
            "accessible": {
                str(step): allowed for step, allowed in accessibility_map(state).items()
            },
            "completed_steps": sorted(state.completed_steps),
        }
    )


def post_quote_summary(
    request: QuoteSummaryRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    region = request.tax_region or dependencies.quote_config.tax.region_code
    tax_rule = dependencies.config_store.get_tax_rule(region)
    if tax_rule is None:
        return error_response(
            code="UNKNOWN_TAX_REGION",
            message=f"No tax rule configured for region '{region}'.",
            details={"tax_region": region},
        )

    try:
        totals = compute_quote_totals(
            request.state,
            accessory_total=request.accessory_total,
            tax_rule=tax_rule,
        )
    except ValueError as exc:
        logger.info(f"Quote summary rejected: {exc}")
        return error_response(
            code="QUOTE_INCOMPLETE",
            message=str(exc),
            details={"error_type": type(exc).__name__},
        )

    return success_response(
        {
            "totals": totals.to_dict(),
            "tax": {
                "region_code": tax_rule.region_code,
                "tax_type": tax_rule.tax_type,
                "rate": tax_rule.rate,
            },
        }
    )
