"""
HarborQuote Quote Engine — Wizard State
========================================
Engine: Quote (multi-step configurator)

WizardState is the accumulated record of one shopper's in-progress
quote: selected motor (with its pricing snapshot), purchase path,
boat details, trade-in, path-specific configuration, financing,
and step bookkeeping.

RULES (NON-NEGOTIABLE):
- State objects are frozen; every change produces a new object
- The motor's PricingResult is a snapshot taken at selection time
- Serialization is JSON-compatible (Decimals as strings, datetimes ISO)

This file contains NO persistence logic.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from core.config.rules import FinancingDefaults
from engines.catalog.models import CatalogItem, as_decimal, as_optional_decimal
from engines.catalog.specs import SpecSheet
from engines.promotion.models import PricingResult


TRADE_IN_MIN_VALUE = Decimal("100")
TRADE_IN_ROUNDING = Decimal("25")


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class PurchasePath(Enum):
    LOOSE = "loose"
    INSTALLED = "installed"


class TradeInCondition(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ══════════════════════════════════════════════════════════════
# SELECTED MOTOR
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SelectedMotor:
    """A catalog item, its pricing at selection time, and its derived spec sheet."""
    item: CatalogItem
    pricing: PricingResult
    spec_sheet: Optional[SpecSheet] = None

    def to_dict(self) -> dict:
        return {
            "item": self.item.to_dict(),
            "pricing": self.pricing.to_dict(),
            "spec_sheet": self.spec_sheet.to_dict() if self.spec_sheet else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SelectedMotor:
        item = nested_record(data, "item")
        pricing = nested_record(data, "pricing")
        if item is None or pricing is None:
            raise ValueError("motor needs both item and pricing.")
        spec_sheet = nested_record(data, "spec_sheet")
        return cls(
            item=CatalogItem.from_dict(item),
            pricing=PricingResult.from_dict(pricing),
            spec_sheet=SpecSheet.from_dict(dict(spec_sheet)) if spec_sheet else None,
        )


# ══════════════════════════════════════════════════════════════
# BOAT INFO
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BoatInfo:
    boat_type: str = ""
    make: str = ""
    model: str = ""
    length: str = ""
    current_motor_brand: str = ""
    current_hp: Optional[Decimal] = None
    serial_number: str = ""
    control_type: str = ""
    shaft_length: str = ""

    def to_dict(self) -> dict:
        return {
            "boat_type": self.boat_type,
            "make": self.make,
            "model": self.model,
            "length": self.length,
            "current_motor_brand": self.current_motor_brand,
            "current_hp": str(self.current_hp) if self.current_hp is not None else None,
            "serial_number": self.serial_number,
            "control_type": self.control_type,
            "shaft_length": self.shaft_length,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BoatInfo:
        return cls(
            boat_type=data.get("boat_type", ""),
            make=data.get("make", ""),
            model=data.get("model", ""),
            length=data.get("length", ""),
            current_motor_brand=data.get("current_motor_brand", ""),
            current_hp=as_optional_decimal(data.get("current_hp"), "current_hp"),
            serial_number=data.get("serial_number", ""),
            control_type=data.get("control_type", ""),
            shaft_length=data.get("shaft_length", ""),
        )


# ══════════════════════════════════════════════════════════════
# TRADE-IN
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TradeInEstimate:
    """Output of the external valuation source."""
    low: Decimal
    high: Decimal
    confidence: Confidence = Confidence.MEDIUM

    def __post_init__(self):
        if self.low < 0 or self.high < 0:
            raise ValueError("Trade-in estimate bounds cannot be negative.")
        if self.low > self.high:
            raise ValueError("Trade-in estimate low must be <= high.")

    def rounded_value(self) -> Decimal:
        """Median of the range rounded to the nearest $25, floored at $100."""
        median = (self.low + self.high) / 2
        steps = (median / TRADE_IN_ROUNDING).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return max(steps * TRADE_IN_ROUNDING, TRADE_IN_MIN_VALUE)


@dataclass(frozen=True)
class TradeInInfo:
    """
    Trade-in details. When has_trade_in is True the quote cannot be
    finalised until estimated_value is populated.
    """
    has_trade_in: bool
    brand: str = ""
    year: Optional[int] = None
    horsepower: Optional[Decimal] = None
    model: str = ""
    serial_number: str = ""
    condition: Optional[TradeInCondition] = None
    estimated_value: Optional[Decimal] = None
    confidence_level: Optional[Confidence] = None

    def __post_init__(self):
        if self.estimated_value is not None and self.estimated_value < 0:
            raise ValueError("estimated_value cannot be negative.")

    @property
    def is_valued(self) -> bool:
        return not self.has_trade_in or self.estimated_value is not None

    @property
    def credit(self) -> Decimal:
        if not self.has_trade_in or self.estimated_value is None:
            return Decimal("0")
        return self.estimated_value

    def with_estimate(self, estimate: TradeInEstimate) -> TradeInInfo:
        return TradeInInfo(
            has_trade_in=self.has_trade_in,
            brand=self.brand,
            year=self.year,
            horsepower=self.horsepower,
            model=self.model,
            serial_number=self.serial_number,
            condition=self.condition,
            estimated_value=estimate.rounded_value(),
            confidence_level=estimate.confidence,
        )

    def to_dict(self) -> dict:
        return {
            "has_trade_in": self.has_trade_in,
            "brand": self.brand,
            "year": self.year,
            "horsepower": str(self.horsepower) if self.horsepower is not None else None,
            "model": self.model,
            "serial_number": self.serial_number,
            "condition": self.condition.value if self.condition else None,
            "estimated_value": (
                str(self.estimated_value) if self.estimated_value is not None else None
            ),
            "confidence_level": (
                self.confidence_level.value if self.confidence_level else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TradeInInfo:
        return cls(
            has_trade_in=bool(data["has_trade_in"]),
            brand=data.get("brand", ""),
            year=data.get("year"),
            horsepower=as_optional_decimal(data.get("horsepower"), "horsepower"),
            model=data.get("model", ""),
            serial_number=data.get("serial_number", ""),
            condition=(
                TradeInCondition(data["condition"]) if data.get("condition") else None
            ),
            estimated_value=as_optional_decimal(
                data.get("estimated_value"), "estimated_value"
            ),
            confidence_level=(
                Confidence(data["confidence_level"])
                if data.get("confidence_level") else None
            ),
        )


# ══════════════════════════════════════════════════════════════
# FINANCING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FinancingTerms:
    down_payment: Decimal = Decimal("0")
    term_months: int = 48
    apr_percent: Decimal = Decimal("7.99")

    def __post_init__(self):
        if self.down_payment < 0:
            raise ValueError("down_payment cannot be negative.")
        if self.term_months <= 0:
            raise ValueError("term_months must be > 0.")
        if self.apr_percent < 0:
            raise ValueError("apr_percent cannot be negative.")

    @classmethod
    def from_defaults(cls, defaults: FinancingDefaults) -> FinancingTerms:
        return cls(
            down_payment=Decimal(defaults.down_payment),
            term_months=defaults.term_months,
            apr_percent=Decimal(defaults.apr_percent),
        )

    def to_dict(self) -> dict:
        return {
            "down_payment": str(self.down_payment),
            "term_months": self.term_months,
            "apr_percent": str(self.apr_percent),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FinancingTerms:
        return cls(
            down_payment=as_decimal(data["down_payment"], "down_payment"),
            term_months=int(data["term_months"]),
            apr_percent=as_decimal(data["apr_percent"], "apr_percent"),
        )


# ══════════════════════════════════════════════════════════════
# WIZARD STATE
# ══════════════════════════════════════════════════════════════

def copy_options(value: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    return None if value is None else copy.deepcopy(dict(value))


def nested_record(data: Mapping[str, Any], field_name: str) -> Optional[Mapping[str, Any]]:
    """Return data[field_name] as a mapping, None when unset. Raises ValueError otherwise."""
    value = data.get(field_name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"{field_name} must be an object, got {type(value).__name__}.")
    return value


@dataclass(frozen=True)
class WizardState:
    """
    Fields:
        motor:             Selected motor snapshot, or None
        purchase_path:     LOOSE | INSTALLED | None
        boat_info:         Required before trade-in on the installed path
        trade_in_info:     Trade-in record (estimated value gates the quote)
        fuel_tank_config:  Loose-path tank selection (free-form options)
        install_config:    Installed-path rigging selection (free-form options)
        financing:         Down payment / term / APR
        completed_steps:   Step ids explicitly advanced past
        current_step:      Step id the shopper is on
        created_at:        When this quote began (None until first change)
        last_activity_at:  Last reducer transition (None until first change)
    """
    motor: Optional[SelectedMotor] = None
    purchase_path: Optional[PurchasePath] = None
    boat_info: Optional[BoatInfo] = None
    trade_in_info: Optional[TradeInInfo] = None
    fuel_tank_config: Optional[Dict[str, Any]] = None
    install_config: Optional[Dict[str, Any]] = None
    financing: FinancingTerms = field(default_factory=FinancingTerms)
    completed_steps: FrozenSet[int] = frozenset()
    current_step: int = 1
    created_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None

    def __post_init__(self):
        if self.purchase_path is not None and not isinstance(self.purchase_path, PurchasePath):
            raise ValueError("purchase_path must be PurchasePath enum or None.")
        if not isinstance(self.completed_steps, frozenset):
            object.__setattr__(self, "completed_steps", frozenset(self.completed_steps))
        if self.current_step < 1:
            raise ValueError("current_step must be >= 1.")

    @classmethod
    def empty(cls, financing: Optional[FinancingDefaults] = None) -> WizardState:
        if financing is None:
            return cls()
        return cls(financing=FinancingTerms.from_defaults(financing))

    @property
    def has_trade_in(self) -> bool:
        return self.trade_in_info is not None and self.trade_in_info.has_trade_in

    def to_dict(self) -> dict:
        return {
            "motor": self.motor.to_dict() if self.motor else None,
            "purchase_path": self.purchase_path.value if self.purchase_path else None,
            "boat_info": self.boat_info.to_dict() if self.boat_info else None,
            "trade_in_info": self.trade_in_info.to_dict() if self.trade_in_info else None,
            "fuel_tank_config": copy_options(self.fuel_tank_config),
            "install_config": copy_options(self.install_config),
            "financing": self.financing.to_dict(),
            "completed_steps": sorted(self.completed_steps),
            "current_step": self.current_step,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_activity_at": (
                self.last_activity_at.isoformat() if self.last_activity_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WizardState:
        if not isinstance(data, Mapping):
            raise ValueError("state must be an object.")
        motor = nested_record(data, "motor")
        boat_info = nested_record(data, "boat_info")
        trade_in_info = nested_record(data, "trade_in_info")
        financing = nested_record(data, "financing")
        return cls(
            motor=SelectedMotor.from_dict(motor) if motor else None,
            purchase_path=(
                PurchasePath(data["purchase_path"]) if data.get("purchase_path") else None
            ),
            boat_info=BoatInfo.from_dict(boat_info) if boat_info else None,
            trade_in_info=TradeInInfo.from_dict(trade_in_info) if trade_in_info else None,
            fuel_tank_config=copy_options(nested_record(data, "fuel_tank_config")),
            install_config=copy_options(nested_record(data, "install_config")),
            financing=FinancingTerms.from_dict(financing) if financing else FinancingTerms(),
            completed_steps=frozenset(int(step) for step in data.get("completed_steps", ())),
            current_step=int(data.get("current_step", 1)),
            created_at=(
                datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None
            ),
            last_activity_at=(
                datetime.fromisoformat(data["last_activity_at"])
                if data.get("last_activity_at") else None
            ),
        )
