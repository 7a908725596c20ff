"""
HarborQuote Catalog Engine — Public API
"""

from engines.catalog.models import (
    CatalogItem,
    MotorCategory,
    StockStatus,
    as_decimal,
    as_optional_decimal,
    catalog_item_from_record,
    derive_category,
    is_quotable,
    is_small_tiller,
    map_stock_status,
)
from engines.catalog.specs import SpecSheet, match_spec_sheet, transom_requirement

__all__ = [
    "CatalogItem",
    "MotorCategory",
    "StockStatus",
    "as_decimal",
    "as_optional_decimal",
    "catalog_item_from_record",
    "derive_category",
    "is_quotable",
    "is_small_tiller",
    "map_stock_status",
    "SpecSheet",
    "match_spec_sheet",
    "transom_requirement",
]
