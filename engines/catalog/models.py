"""
HarborQuote Catalog Engine — Catalog Item
==========================================
Engine: Catalog (outboard motor inventory)

RULES (NON-NEGOTIABLE):
- Items are immutable snapshots for one pricing run
- Prices and horsepower are Decimal (no floats)
- sale_price only counts when it undercuts base_price
- Category and stock status are derived from raw data, not trusted

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class MotorCategory(Enum):
    PORTABLE = "portable"
    MID_RANGE = "mid-range"
    HIGH_PERFORMANCE = "high-performance"
    V8_RACING = "v8-racing"


class StockStatus(Enum):
    IN_STOCK = "In Stock"
    ON_ORDER = "On Order"
    ORDER_NOW = "Order Now"
    SOLD = "Sold"


MAX_QUOTABLE_HORSEPOWER = Decimal("300")
SMALL_TILLER_MAX_HORSEPOWER = Decimal("9.9")


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

def as_decimal(value: Any, field_name: str) -> Decimal:
    """Coerce a number or numeric string to Decimal. Floats go through str()."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got bool.")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"{field_name} must be numeric, got {value!r}.") from exc
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ValueError(f"{field_name} must be numeric, got {type(value).__name__}.")
    if not result.is_finite():
        raise ValueError(f"{field_name} must be finite.")
    return result


def as_optional_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return as_decimal(value, field_name)


def derive_category(horsepower: Decimal) -> MotorCategory:
    """Bucket a motor by horsepower."""
    if horsepower <= 30:
        return MotorCategory.PORTABLE
    if horsepower >= 350:
        return MotorCategory.V8_RACING
    if horsepower >= 200:
        return MotorCategory.HIGH_PERFORMANCE
    return MotorCategory.MID_RANGE


def map_stock_status(availability: Optional[str]) -> StockStatus:
    for status in (StockStatus.ON_ORDER, StockStatus.ORDER_NOW, StockStatus.SOLD):
        if availability == status.value:
            return status
    return StockStatus.IN_STOCK


# ══════════════════════════════════════════════════════════════
# CATALOG ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CatalogItem:
    """
    A priced outboard motor.

    Fields:
        item_id:      Unique identifier
        model:        Model designation (e.g. "115 ELPT FourStroke")
        horsepower:   Rated horsepower
        base_price:   List price (>= 0)
        sale_price:   Optional dealer price
        motor_type:   Variant label used by motor_type rules (e.g. "Tiller")
        category:     Size bucket; derived from horsepower when omitted
    """
    item_id: str
    model: str
    horsepower: Decimal
    base_price: Decimal
    sale_price: Optional[Decimal] = None
    motor_type: str = ""
    category: Optional[MotorCategory] = None
    year: Optional[int] = None
    make: str = "Mercury"
    stock_status: StockStatus = StockStatus.IN_STOCK
    stock_number: Optional[str] = None

    def __post_init__(self):
        if not self.item_id or not isinstance(self.item_id, str):
            raise ValueError("item_id must be non-empty string.")
        if not isinstance(self.model, str):
            raise ValueError("model must be a string.")
        if not isinstance(self.horsepower, Decimal):
            raise TypeError("horsepower must be Decimal.")
        if not isinstance(self.base_price, Decimal):
            raise TypeError("base_price must be Decimal.")
        if self.base_price < 0:
            raise ValueError("base_price cannot be negative.")
        if self.sale_price is not None and not isinstance(self.sale_price, Decimal):
            raise TypeError("sale_price must be Decimal or None.")
        if not isinstance(self.stock_status, StockStatus):
            raise ValueError("stock_status must be StockStatus enum.")
        if self.category is None:
            object.__setattr__(self, "category", derive_category(self.horsepower))
        elif not isinstance(self.category, MotorCategory):
            raise ValueError("category must be MotorCategory enum.")

    @property
    def original_price(self) -> Decimal:
        """Starting price for promotions: a positive sale_price below base wins."""
        if (
            self.sale_price is not None
            and 0 < self.sale_price < self.base_price
        ):
            return self.sale_price
        return self.base_price

    @property
    def is_jet(self) -> bool:
        return "jet" in self.model.lower()

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "model": self.model,
            "horsepower": str(self.horsepower),
            "base_price": str(self.base_price),
            "sale_price": str(self.sale_price) if self.sale_price is not None else None,
            "motor_type": self.motor_type,
            "category": self.category.value,
            "year": self.year,
            "make": self.make,
            "stock_status": self.stock_status.value,
            "stock_number": self.stock_number,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CatalogItem:
        return cls(
            item_id=data["item_id"],
            model=data["model"],
            horsepower=as_decimal(data["horsepower"], "horsepower"),
            base_price=as_decimal(data["base_price"], "base_price"),
            sale_price=as_optional_decimal(data.get("sale_price"), "sale_price"),
            motor_type=data.get("motor_type") or "",
            category=MotorCategory(data["category"]) if data.get("category") else None,
            year=data.get("year"),
            make=data.get("make") or "Mercury",
            stock_status=StockStatus(data.get("stock_status") or StockStatus.IN_STOCK.value),
            stock_number=data.get("stock_number"),
        )


def catalog_item_from_record(record: Mapping[str, Any]) -> CatalogItem:
    """
    Build a CatalogItem from a raw inventory row.

    Expected keys: id, model, horsepower, base_price; optional
    sale_price, motor_type, year, make, availability, stock_number.
    Raises ValueError on missing or malformed fields.
    """
    try:
        item_id = record["id"]
        model = record["model"]
    except KeyError as exc:
        raise ValueError(f"Inventory record missing field {exc.args[0]!r}.") from exc
    year = record.get("year")
    return CatalogItem(
        item_id=str(item_id),
        model=str(model),
        horsepower=as_decimal(record.get("horsepower"), "horsepower"),
        base_price=as_decimal(record.get("base_price") or 0, "base_price"),
        sale_price=as_optional_decimal(record.get("sale_price"), "sale_price"),
        motor_type=str(record.get("motor_type") or ""),
        year=int(year) if year not in (None, "") else None,
        make=str(record.get("make") or "Mercury"),
        stock_status=map_stock_status(record.get("availability")),
        stock_number=record.get("stock_number"),
    )


def is_quotable(item: CatalogItem) -> bool:
    """Jet drives and motors above 300 HP are not sold through the configurator."""
    return not item.is_jet and item.horsepower <= MAX_QUOTABLE_HORSEPOWER


def is_small_tiller(item: CatalogItem) -> bool:
    """Small tiller motors skip boat info on the loose path and get a fuel-tank step."""
    return (
        item.horsepower <= SMALL_TILLER_MAX_HORSEPOWER
        and "tiller" in item.motor_type.lower()
    )
