"""
HarborQuote Promotion Engine — Record Translation
==================================================
Turns raw promotion / rule rows (snake_case dicts from a database,
spreadsheet export or API) into typed domain objects.

Single-record translators raise PromotionDataError. The bulk
loaders catch it, log the bad row and carry on: a malformed
promotion contributes nothing rather than breaking pricing.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, List, Mapping, Optional

from engines.catalog.models import as_decimal, as_optional_decimal
from engines.promotion.models import (
    HorsepowerRange,
    MatchAll,
    ModelMatch,
    MotorTypeMatch,
    Promotion,
    PromotionKind,
    PromotionRule,
    RuleMatch,
    RuleType,
)

logger = logging.getLogger("harborquote.promotion")


class PromotionDataError(ValueError):
    """A promotion or rule record cannot be translated."""

    def __init__(self, message: str, record_id: str = ""):
        super().__init__(message)
        self.record_id = record_id


# ══════════════════════════════════════════════════════════════
# FIELD PARSERS
# ══════════════════════════════════════════════════════════════

def parse_boundary(value: Any, *, end_of_day: bool) -> Optional[datetime]:
    """
    Parse a promotion date bound.

    Date-only values cover the whole UTC day: a start bound begins at
    00:00, an end bound runs through 23:59:59.999999. Naive datetimes
    are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.max if end_of_day else time.min)
    elif isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            day = date.fromisoformat(text)
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported date value {value!r}.")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _discount_pair(record: Mapping[str, Any]):
    pct = as_optional_decimal(record.get("discount_percentage"), "discount_percentage")
    fixed = as_optional_decimal(record.get("discount_fixed_amount"), "discount_fixed_amount")
    return (
        pct if pct is not None else as_decimal(0, "discount_percentage"),
        fixed if fixed is not None else as_decimal(0, "discount_fixed_amount"),
    )


# ══════════════════════════════════════════════════════════════
# SINGLE-RECORD TRANSLATORS
# ══════════════════════════════════════════════════════════════

def promotion_from_record(record: Mapping[str, Any]) -> Promotion:
    record_id = str(record.get("id") or "")
    try:
        pct, fixed = _discount_pair(record)
        return Promotion(
            promotion_id=record_id,
            name=str(record.get("name") or ""),
            kind=PromotionKind(record.get("kind") or PromotionKind.DISCOUNT.value),
            discount_percentage=pct,
            discount_fixed_amount=fixed,
            stackable=bool(record.get("stackable", False)),
            is_active=bool(record.get("is_active", False)),
            start_date=parse_boundary(record.get("start_date"), end_of_day=False),
            end_date=parse_boundary(record.get("end_date"), end_of_day=True),
            priority=int(record.get("priority") or 0),
            highlight=bool(record.get("highlight", False)),
            bonus_title=_text(record.get("bonus_title")),
            bonus_short_badge=_text(record.get("bonus_short_badge")),
            bonus_description=_text(record.get("bonus_description")),
            warranty_extra_years=int(record.get("warranty_extra_years") or 0),
            terms_url=_text(record.get("terms_url")),
        )
    except (TypeError, ValueError) as exc:
        raise PromotionDataError(
            f"Invalid promotion record '{record_id}': {exc}", record_id=record_id
        ) from exc


def _rule_match(rule_type: RuleType, record: Mapping[str, Any]) -> RuleMatch:
    if rule_type is RuleType.ALL:
        return MatchAll()
    if rule_type is RuleType.MODEL:
        return ModelMatch(model=str(record.get("model") or ""))
    if rule_type is RuleType.MOTOR_TYPE:
        return MotorTypeMatch(motor_type=str(record.get("motor_type") or ""))
    if rule_type is RuleType.HORSEPOWER_RANGE:
        return HorsepowerRange(
            min_hp=as_optional_decimal(record.get("horsepower_min"), "horsepower_min"),
            max_hp=as_optional_decimal(record.get("horsepower_max"), "horsepower_max"),
        )
    raise ValueError(f"Unhandled rule type {rule_type!r}.")


def rule_from_record(record: Mapping[str, Any]) -> PromotionRule:
    record_id = str(record.get("id") or "")
    try:
        rule_type = RuleType(record.get("rule_type"))
        pct, fixed = _discount_pair(record)
        return PromotionRule(
            rule_id=record_id,
            promotion_id=str(record.get("promotion_id") or ""),
            match=_rule_match(rule_type, record),
            discount_percentage=pct,
            discount_fixed_amount=fixed,
        )
    except (TypeError, ValueError) as exc:
        raise PromotionDataError(
            f"Invalid promotion rule record '{record_id}': {exc}", record_id=record_id
        ) from exc


# ══════════════════════════════════════════════════════════════
# BULK LOADERS
# ══════════════════════════════════════════════════════════════

def load_promotions(records: Iterable[Mapping[str, Any]]) -> List[Promotion]:
    promotions: List[Promotion] = []
    for record in records:
        try:
            promotions.append(promotion_from_record(record))
        except PromotionDataError as exc:
            logger.warning(f"Skipping promotion: {exc}")
    return promotions


def load_rules(records: Iterable[Mapping[str, Any]]) -> List[PromotionRule]:
    rules: List[PromotionRule] = []
    for record in records:
        try:
            rules.append(rule_from_record(record))
        except PromotionDataError as exc:
            logger.warning(f"Skipping promotion rule: {exc}")
    return rules
