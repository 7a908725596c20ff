"""
HarborQuote Promotion Engine — Policies
========================================
Pure predicates: is a promotion live, does a rule cover an item,
does a promotion actually define a discount for an item.

Malformed payloads never raise here. They are logged and treated
as "does not match" so one bad row cannot break catalog pricing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Sequence

from engines.catalog.models import CatalogItem
from engines.promotion.models import (
    HorsepowerRange,
    MatchAll,
    ModelMatch,
    MotorTypeMatch,
    Promotion,
    PromotionRule,
)

logger = logging.getLogger("harborquote.promotion")


def is_promotion_active(promotion: Promotion, now: datetime) -> bool:
    if not promotion.is_active:
        return False
    if promotion.start_date is not None and now < promotion.start_date:
        return False
    if promotion.end_date is not None and now > promotion.end_date:
        return False
    return True


def rule_matches(rule: PromotionRule, item: CatalogItem) -> bool:
    match = rule.match
    if isinstance(match, MatchAll):
        return True
    if isinstance(match, ModelMatch):
        needle = match.model.strip().lower()
        if not needle:
            logger.warning(f"Rule '{rule.rule_id}' has an empty model; ignoring.")
            return False
        return needle in item.model.lower()
    if isinstance(match, MotorTypeMatch):
        wanted = match.motor_type.strip().lower()
        if not wanted:
            logger.warning(f"Rule '{rule.rule_id}' has an empty motor_type; ignoring.")
            return False
        return wanted == item.motor_type.strip().lower()
    if isinstance(match, HorsepowerRange):
        if match.is_malformed:
            logger.warning(
                f"Rule '{rule.rule_id}' horsepower range is inverted "
                f"({match.min_hp} > {match.max_hp}); ignoring."
            )
            return False
        if match.min_hp is not None and item.horsepower < match.min_hp:
            return False
        if match.max_hp is not None and item.horsepower > match.max_hp:
            return False
        return True
    raise TypeError(f"Unhandled rule scope: {type(match).__name__}")


def matching_rules(
    promotion: Promotion,
    rules: Iterable[PromotionRule],
    item: CatalogItem,
) -> List[PromotionRule]:
    """Rules owned by `promotion` that cover `item`, in input order."""
    return [
        rule for rule in rules
        if rule.promotion_id == promotion.promotion_id and rule_matches(rule, item)
    ]


def defines_discount(promotion: Promotion, matched: Sequence[PromotionRule]) -> bool:
    """A discount promotion counts only if some level supplies a non-zero value."""
    return promotion.has_discount or any(rule.has_override for rule in matched)
