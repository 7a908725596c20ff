"""
HarborQuote Promotion Engine — Pricing Service
===============================================
Computes one effective price plus disclosed bonuses for a catalog
item under an open-ended set of promotions.

Order of operations:
    1. original = sale price (if it undercuts base) else base price
    2. keep active promotions with at least one rule covering the item
    3. stackable discounts, in input order, each against the running price
    4. the single best non-stackable discount against the stacked price
    5. round half-up to a whole dollar
    6. bonuses (highlighted first, then by priority) — price-neutral

Pure and synchronous: same inputs, same PricingResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.time.clock import Clock, get_default_clock
from engines.catalog.models import CatalogItem, is_quotable
from engines.promotion.models import (
    BonusOffer,
    PricingResult,
    Promotion,
    PromotionKind,
    PromotionRule,
)
from engines.promotion.policies import (
    defines_discount,
    is_promotion_active,
    matching_rules,
)

logger = logging.getLogger("harborquote.promotion")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ApplicablePromotion:
    promotion: Promotion
    rules: Tuple[PromotionRule, ...]


# ══════════════════════════════════════════════════════════════
# PURE HELPERS
# ══════════════════════════════════════════════════════════════

def discounted_price(start: Decimal, fixed: Decimal, pct: Decimal) -> Decimal:
    """Fixed amount first (floored at zero), then the percentage."""
    return max(_ZERO, start - fixed) * (1 - pct / _HUNDRED)


def best_price_for(applicable: ApplicablePromotion, start: Decimal) -> Decimal:
    """
    Lowest price any matching rule of the promotion achieves from `start`.

    A rule with an override uses its own pair; otherwise the
    promotion-level pair applies. Ties keep the first rule.
    """
    promotion = applicable.promotion
    best: Optional[Decimal] = None
    for rule in applicable.rules:
        if rule.has_override:
            fixed, pct = rule.discount_fixed_amount, rule.discount_percentage
        else:
            fixed, pct = promotion.discount_fixed_amount, promotion.discount_percentage
        candidate = discounted_price(start, fixed, pct)
        if best is None or candidate < best:
            best = candidate
    return start if best is None else best


def round_price(price: Decimal) -> int:
    return int(price.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def bonus_offer_for(promotion: Promotion) -> BonusOffer:
    if promotion.bonus_short_badge is not None:
        badge = promotion.bonus_short_badge
    elif promotion.warranty_extra_years > 0:
        badge = f"+{promotion.warranty_extra_years}Y Warranty"
    else:
        badge = "Bonus Offer"
    return BonusOffer(
        offer_id=promotion.promotion_id,
        title=promotion.bonus_title if promotion.bonus_title is not None else promotion.name,
        short_badge=badge,
        description=promotion.bonus_description,
        warranty_extra_years=promotion.warranty_extra_years,
        terms_url=promotion.terms_url,
        highlight=promotion.highlight,
        ends_at=promotion.end_date,
        priority=promotion.priority,
    )


def _earliest(current: Optional[datetime], candidate: Optional[datetime]) -> Optional[datetime]:
    if candidate is None:
        return current
    if current is None or candidate < current:
        return candidate
    return current


def _rules_by_promotion(rules: Iterable[PromotionRule]) -> Dict[str, List[PromotionRule]]:
    grouped: Dict[str, List[PromotionRule]] = {}
    for rule in rules:
        grouped.setdefault(rule.promotion_id, []).append(rule)
    return grouped


def applicable_promotions(
    item: CatalogItem,
    promotions: Sequence[Promotion],
    rules: Sequence[PromotionRule],
    now: datetime,
) -> List[ApplicablePromotion]:
    """Active promotions with at least one rule covering `item`, in input order."""
    grouped = _rules_by_promotion(rules)
    result: List[ApplicablePromotion] = []
    for promotion in promotions:
        if not is_promotion_active(promotion, now):
            continue
        matched = tuple(
            matching_rules(promotion, grouped.get(promotion.promotion_id, ()), item)
        )
        if matched:
            result.append(ApplicablePromotion(promotion=promotion, rules=matched))
    return result


# ══════════════════════════════════════════════════════════════
# EVALUATOR
# ══════════════════════════════════════════════════════════════

def evaluate(
    item: CatalogItem,
    promotions: Sequence[Promotion],
    rules: Sequence[PromotionRule],
    now: Optional[datetime] = None,
) -> PricingResult:
    """Price one item. `now` defaults to the process default clock."""
    if now is None:
        now = get_default_clock().now_utc()
    original = item.original_price
    applicable = applicable_promotions(item, promotions, rules, now)

    discounts = [
        entry for entry in applicable
        if entry.promotion.kind is PromotionKind.DISCOUNT
        and defines_discount(entry.promotion, entry.rules)
    ]
    bonuses = [
        entry for entry in applicable
        if entry.promotion.kind is PromotionKind.BONUS
    ]

    price = original
    names: List[str] = []
    earliest_end: Optional[datetime] = None

    for entry in discounts:
        if not entry.promotion.stackable:
            continue
        price = best_price_for(entry, price)
        names.append(entry.promotion.name)
        earliest_end = _earliest(earliest_end, entry.promotion.end_date)

    best: Optional[Tuple[ApplicablePromotion, Decimal]] = None
    for entry in discounts:
        if entry.promotion.stackable:
            continue
        candidate = best_price_for(entry, price)
        if best is None or candidate < best[1]:
            best = (entry, candidate)
    if best is not None:
        price = best[1]
        names.append(best[0].promotion.name)
        earliest_end = _earliest(earliest_end, best[0].promotion.end_date)

    effective = max(0, round_price(price))

    offers: List[BonusOffer] = []
    ordered_bonuses = sorted(
        bonuses,
        key=lambda entry: (not entry.promotion.highlight, -entry.promotion.priority),
    )
    for entry in ordered_bonuses:
        offers.append(bonus_offer_for(entry.promotion))
        names.append(entry.promotion.name)
        earliest_end = _earliest(earliest_end, entry.promotion.end_date)

    logger.debug(
        f"Priced item '{item.item_id}': {original} -> {effective} "
        f"({len(names)} promotion(s))"
    )
    return PricingResult(
        original_price=original,
        effective_price=effective,
        applied_promotion_names=tuple(names),
        bonus_offers=tuple(offers),
        promo_ends_at=earliest_end,
    )


class PromotionEvaluator:
    """
    Holds one snapshot of promotions and rules and prices items
    against it. Time comes from the injected clock at each call.
    """

    def __init__(
        self,
        promotions: Sequence[Promotion],
        rules: Sequence[PromotionRule],
        clock: Optional[Clock] = None,
    ):
        self._promotions = tuple(promotions)
        self._rules = tuple(rules)
        self._clock = clock or get_default_clock()

    def evaluate(self, item: CatalogItem) -> PricingResult:
        return evaluate(item, self._promotions, self._rules, self._clock.now_utc())

    def price_catalog(
        self, items: Iterable[CatalogItem]
    ) -> List[Tuple[CatalogItem, PricingResult]]:
        return price_catalog(items, self._promotions, self._rules, self._clock.now_utc())


def price_catalog(
    items: Iterable[CatalogItem],
    promotions: Sequence[Promotion],
    rules: Sequence[PromotionRule],
    now: Optional[datetime] = None,
) -> List[Tuple[CatalogItem, PricingResult]]:
    """Price every quotable item, ordered by horsepower."""
    if now is None:
        now = get_default_clock().now_utc()
    quotable = sorted(
        (item for item in items if is_quotable(item)),
        key=lambda item: item.horsepower,
    )
    return [(item, evaluate(item, promotions, rules, now)) for item in quotable]
