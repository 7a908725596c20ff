"""
HarborQuote Promotion Engine — Domain Model
============================================
Engine: Promotion (discounts and bonus offers on catalog items)

Promotions are time-bound offers. A DISCOUNT promotion lowers the
price; a BONUS promotion attaches a price-neutral disclosure such
as an extended warranty. PromotionRules scope a promotion to items
and may override its discount values.

Rule scope is a closed sum type: every PromotionRule carries exactly
one of MatchAll, ModelMatch, MotorTypeMatch or HorsepowerRange, so
matching code branches on the payload type, never on loose fields.

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union

from engines.catalog.models import as_decimal


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class PromotionKind(Enum):
    DISCOUNT = "discount"
    BONUS = "bonus"


class RuleType(Enum):
    ALL = "all"
    MODEL = "model"
    MOTOR_TYPE = "motor_type"
    HORSEPOWER_RANGE = "horsepower_range"


# ══════════════════════════════════════════════════════════════
# RULE SCOPE PAYLOADS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MatchAll:
    rule_type = RuleType.ALL


@dataclass(frozen=True)
class ModelMatch:
    """Matches items whose model contains `model` (case-insensitive)."""
    model: str
    rule_type = RuleType.MODEL


@dataclass(frozen=True)
class MotorTypeMatch:
    """Matches items whose motor_type equals `motor_type` (case-insensitive)."""
    motor_type: str
    rule_type = RuleType.MOTOR_TYPE


@dataclass(frozen=True)
class HorsepowerRange:
    """
    Matches items with min_hp <= horsepower <= max_hp.
    An unset bound is open. A range with min_hp > max_hp is
    malformed and never matches.
    """
    min_hp: Optional[Decimal] = None
    max_hp: Optional[Decimal] = None
    rule_type = RuleType.HORSEPOWER_RANGE

    @property
    def is_malformed(self) -> bool:
        return (
            self.min_hp is not None
            and self.max_hp is not None
            and self.min_hp > self.max_hp
        )


RuleMatch = Union[MatchAll, ModelMatch, MotorTypeMatch, HorsepowerRange]


def _validate_discount(pct: Decimal, fixed: Decimal, owner: str) -> None:
    if not isinstance(pct, Decimal) or not isinstance(fixed, Decimal):
        raise TypeError(f"{owner} discount values must be Decimal.")
    if not 0 <= pct <= 100:
        raise ValueError(f"{owner} discount_percentage must be between 0 and 100, got {pct}.")
    if fixed < 0:
        raise ValueError(f"{owner} discount_fixed_amount cannot be negative, got {fixed}.")


def _aware(value: Optional[datetime], field_name: str) -> None:
    if value is not None and value.tzinfo is None:
        raise ValueError(f"{field_name} must be timezone-aware.")


# ══════════════════════════════════════════════════════════════
# PROMOTION RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PromotionRule:
    """
    Scopes a promotion to items.

    discount_percentage / discount_fixed_amount of 0 mean "no override":
    the owning promotion's values apply. When either is non-zero the
    rule's pair replaces the promotion's pair.
    """
    rule_id: str
    promotion_id: str
    match: RuleMatch
    discount_percentage: Decimal = Decimal("0")
    discount_fixed_amount: Decimal = Decimal("0")

    def __post_init__(self):
        if not self.rule_id:
            raise ValueError("rule_id must be non-empty.")
        if not self.promotion_id:
            raise ValueError("promotion_id must be non-empty.")
        if not isinstance(self.match, (MatchAll, ModelMatch, MotorTypeMatch, HorsepowerRange)):
            raise TypeError("match must be a rule scope payload.")
        _validate_discount(
            self.discount_percentage, self.discount_fixed_amount, f"Rule '{self.rule_id}'"
        )

    @property
    def rule_type(self) -> RuleType:
        return self.match.rule_type

    @property
    def has_override(self) -> bool:
        return self.discount_percentage != 0 or self.discount_fixed_amount != 0


# ══════════════════════════════════════════════════════════════
# PROMOTION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Promotion:
    """
    A named, time-bounded offer.

    Active iff is_active and start_date <= now <= end_date
    (unset bounds are open). Bonus fields are ignored for DISCOUNT
    promotions; discount fields and `stackable` are ignored for BONUS.
    """
    promotion_id: str
    name: str
    kind: PromotionKind = PromotionKind.DISCOUNT
    discount_percentage: Decimal = Decimal("0")
    discount_fixed_amount: Decimal = Decimal("0")
    stackable: bool = False
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    priority: int = 0
    highlight: bool = False
    bonus_title: Optional[str] = None
    bonus_short_badge: Optional[str] = None
    bonus_description: Optional[str] = None
    warranty_extra_years: int = 0
    terms_url: Optional[str] = None

    def __post_init__(self):
        if not self.promotion_id:
            raise ValueError("promotion_id must be non-empty.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be non-empty string.")
        if not isinstance(self.kind, PromotionKind):
            raise ValueError("kind must be PromotionKind enum.")
        _validate_discount(
            self.discount_percentage, self.discount_fixed_amount,
            f"Promotion '{self.promotion_id}'",
        )
        _aware(self.start_date, "start_date")
        _aware(self.end_date, "end_date")
        if self.warranty_extra_years < 0:
            raise ValueError("warranty_extra_years cannot be negative.")

    @property
    def has_discount(self) -> bool:
        return self.discount_percentage != 0 or self.discount_fixed_amount != 0


# ══════════════════════════════════════════════════════════════
# PRICING OUTPUT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BonusOffer:
    """Price-neutral disclosure attached to a priced item."""
    offer_id: str
    title: str
    short_badge: str
    description: Optional[str] = None
    warranty_extra_years: int = 0
    terms_url: Optional[str] = None
    highlight: bool = False
    ends_at: Optional[datetime] = None
    priority: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.offer_id,
            "title": self.title,
            "short_badge": self.short_badge,
            "description": self.description,
            "warranty_extra_years": self.warranty_extra_years,
            "terms_url": self.terms_url,
            "highlight": self.highlight,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: dict) -> BonusOffer:
        return cls(
            offer_id=data["id"],
            title=data["title"],
            short_badge=data["short_badge"],
            description=data.get("description"),
            warranty_extra_years=data.get("warranty_extra_years", 0),
            terms_url=data.get("terms_url"),
            highlight=data.get("highlight", False),
            ends_at=(
                datetime.fromisoformat(data["ends_at"])
                if data.get("ends_at") else None
            ),
            priority=data.get("priority", 0),
        )


@dataclass(frozen=True)
class PricingResult:
    """
    Evaluator output for one item.

    applied_promotion_names lists discounts (stackable in input order,
    then the single best non-stackable) followed by bonuses.
    promo_ends_at is the earliest end_date among every contributing
    promotion, or None.
    """
    original_price: Decimal
    effective_price: int
    applied_promotion_names: Tuple[str, ...] = ()
    bonus_offers: Tuple[BonusOffer, ...] = ()
    promo_ends_at: Optional[datetime] = None

    def __post_init__(self):
        if self.effective_price < 0:
            raise ValueError("effective_price cannot be negative.")

    @property
    def savings(self) -> Decimal:
        return max(Decimal("0"), self.original_price - self.effective_price)

    @property
    def has_promotions(self) -> bool:
        return bool(self.applied_promotion_names)

    def to_dict(self) -> dict:
        return {
            "original_price": str(self.original_price),
            "effective_price": self.effective_price,
            "savings": str(self.savings),
            "applied_promotion_names": list(self.applied_promotion_names),
            "bonus_offers": [offer.to_dict() for offer in self.bonus_offers],
            "promo_ends_at": (
                self.promo_ends_at.isoformat() if self.promo_ends_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> PricingResult:
        return cls(
            original_price=as_decimal(data["original_price"], "original_price"),
            effective_price=int(data["effective_price"]),
            applied_promotion_names=tuple(data.get("applied_promotion_names", ())),
            bonus_offers=tuple(
                BonusOffer.from_dict(offer) for offer in data.get("bonus_offers", ())
            ),
            promo_ends_at=(
                datetime.fromisoformat(data["promo_ends_at"])
                if data.get("promo_ends_at") else None
            ),
        )
