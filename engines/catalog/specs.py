"""
HarborQuote Catalog Engine — Spec Sheet Lookup
===============================================
Horsepower-bracketed performance guidance shown alongside a
selected motor. Derived, never stored independently of the motor:
the quote reducer recomputes it whenever the motor changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from engines.catalog.models import CatalogItem


# (upper horsepower bound inclusive, value); None bound = catch-all
_BOAT_SIZE: Sequence[Tuple[Optional[int], str]] = (
    (6, "Up to 12ft"),
    (15, "12-16ft"),
    (30, "14-18ft"),
    (60, "16-20ft"),
    (90, "18-22ft"),
    (115, "20-24ft"),
    (150, "22-26ft"),
    (200, "24-28ft"),
    (None, "26ft+"),
)

_SPEED: Sequence[Tuple[Optional[int], str]] = (
    (6, "5-8 mph"),
    (15, "15-20 mph"),
    (30, "25-30 mph"),
    (60, "35-40 mph"),
    (90, "40-45 mph"),
    (115, "45-50 mph"),
    (150, "50-55 mph"),
    (None, "55+ mph"),
)

_FUEL: Sequence[Tuple[Optional[int], str]] = (
    (6, "0.5-1 gph"),
    (15, "1-2 gph"),
    (30, "2-3 gph"),
    (60, "4-6 gph"),
    (90, "7-9 gph"),
    (115, "9-11 gph"),
    (150, "12-15 gph"),
    (None, "15+ gph"),
)

_RANGE: Sequence[Tuple[Optional[int], str]] = (
    (6, "N/A (portable tank)"),
    (15, "80-120 miles"),
    (30, "70-110 miles"),
    (60, "60-100 miles"),
    (90, "55-90 miles"),
    (115, "50-85 miles"),
    (150, "45-80 miles"),
    (None, "40-70 miles"),
)

# Checked in order; first match wins.
_TRANSOM_PATTERNS: Sequence[Tuple[str, str]] = (
    (r"\bXXL\b", '30" (XXL) transom'),
    (r"XL|EXLPT|EXLHPT|EXLH", '25" (XL) transom'),
    (r"\bL\b|ELPT|MLH|LPT|\bEL\b", '20" (L) transom'),
)
_DEFAULT_TRANSOM = '15" (S) transom'


def _bracket(table: Sequence[Tuple[Optional[int], str]], hp: Decimal) -> str:
    for bound, value in table:
        if bound is None or hp <= bound:
            return value
    return table[-1][1]


def transom_requirement(model: str) -> str:
    code = model.upper()
    for pattern, label in _TRANSOM_PATTERNS:
        if re.search(pattern, code):
            return label
    return _DEFAULT_TRANSOM


@dataclass(frozen=True)
class SpecSheet:
    item_id: str
    recommended_boat_size: str
    estimated_speed: str
    fuel_consumption: str
    range: str
    transom: str

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "recommended_boat_size": self.recommended_boat_size,
            "estimated_speed": self.estimated_speed,
            "fuel_consumption": self.fuel_consumption,
            "range": self.range,
            "transom": self.transom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SpecSheet:
        return cls(
            item_id=data["item_id"],
            recommended_boat_size=data["recommended_boat_size"],
            estimated_speed=data["estimated_speed"],
            fuel_consumption=data["fuel_consumption"],
            range=data["range"],
            transom=data["transom"],
        )


def match_spec_sheet(item: CatalogItem) -> SpecSheet:
    hp = item.horsepower
    return SpecSheet(
        item_id=item.item_id,
        recommended_boat_size=_bracket(_BOAT_SIZE, hp),
        estimated_speed=_bracket(_SPEED, hp),
        fuel_consumption=_bracket(_FUEL, hp),
        range=_bracket(_RANGE, hp),
        transom=transom_requirement(item.model),
    )
