"""
HarborQuote HTTP API - Contracts
================================
Framework-agnostic request/response DTOs for pricing and quote endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from engines.catalog.models import CatalogItem
from engines.promotion.models import Promotion, PromotionRule
from engines.quote.state import WizardState


def _require_tuple(value: Any, field_name: str, item_type: type) -> None:
    if not isinstance(value, tuple):
        raise ValueError(f"{field_name} must be a tuple.")
    for entry in value:
        if not isinstance(entry, item_type):
            raise ValueError(f"{field_name} entries must be {item_type.__name__}.")


def _require_aware(value: Optional[datetime], field_name: str) -> None:
    if value is None:
        return
    if not isinstance(value, datetime) or value.tzinfo is None:
        raise ValueError(f"{field_name} must be a timezone-aware datetime or None.")


@dataclass(frozen=True)
class PricingEvaluateRequest:
    item: CatalogItem
    promotions: tuple[Promotion, ...] = ()
    rules: tuple[PromotionRule, ...] = ()
    now: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.item, CatalogItem):
            raise ValueError("item must be CatalogItem.")
        _require_tuple(self.promotions, "promotions", Promotion)
        _require_tuple(self.rules, "rules", PromotionRule)
        _require_aware(self.now, "now")


@dataclass(frozen=True)
class CatalogPricingRequest:
    items: tuple[CatalogItem, ...]
    promotions: tuple[Promotion, ...] = ()
    rules: tuple[PromotionRule, ...] = ()
    now: Optional[datetime] = None

    def __post_init__(self):
        _require_tuple(self.items, "items", CatalogItem)
        _require_tuple(self.promotions, "promotions", Promotion)
        _require_tuple(self.rules, "rules", PromotionRule)
        _require_aware(self.now, "now")


@dataclass(frozen=True)
class QuoteStepsRequest:
    state: WizardState

    def __post_init__(self):
        if not isinstance(self.state, WizardState):
            raise ValueError("state must be WizardState.")


@dataclass(frozen=True)
class QuoteSummaryRequest:
    state: WizardState
    accessory_total: Decimal = Decimal("0")
    tax_region: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.state, WizardState):
            raise ValueError("state must be WizardState.")
        if not isinstance(self.accessory_total, Decimal):
            raise ValueError("accessory_total must be Decimal.")
        if self.accessory_total < 0:
            raise ValueError("accessory_total cannot be negative.")
        if self.tax_region is not None and not self.tax_region:
            raise ValueError("tax_region must be a non-empty string or None.")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            payload = {"ok": True, "data": self.data}
            if self.meta:
                payload["meta"] = dict(self.meta)
            return payload
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}
