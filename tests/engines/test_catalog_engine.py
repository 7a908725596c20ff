"""
Tests — Catalog Engine (items, categories, quotability, spec sheets)
"""

from decimal import Decimal

import pytest

from engines.catalog.models import (
    CatalogItem,
    MotorCategory,
    StockStatus,
    as_decimal,
    catalog_item_from_record,
    derive_category,
    is_quotable,
    is_small_tiller,
    map_stock_status,
)
from engines.catalog.specs import match_spec_sheet, transom_requirement


def _item(**overrides) -> CatalogItem:
    fields = dict(
        item_id="m-115",
        model="115 ELPT FourStroke",
        horsepower=Decimal("115"),
        base_price=Decimal("10000"),
    )
    fields.update(overrides)
    return CatalogItem(**fields)


class TestAsDecimal:
    def test_accepts_numeric_string(self):
        assert as_decimal(" 9.9 ", "hp") == Decimal("9.9")

    def test_float_goes_through_str(self):
        assert as_decimal(9.9, "hp") == Decimal("9.9")

    def test_rejects_bool(self):
        with pytest.raises(ValueError, match="bool"):
            as_decimal(True, "hp")

    def test_rejects_garbage(self):
        with pytest.raises(ValueError, match="numeric"):
            as_decimal("lots", "hp")

    def test_rejects_nan(self):
        with pytest.raises(ValueError, match="finite"):
            as_decimal("NaN", "hp")


class TestCatalogItem:
    def test_original_price_is_base_without_sale(self):
        assert _item().original_price == Decimal("10000")

    def test_sale_price_below_base_wins(self):
        assert _item(sale_price=Decimal("9000")).original_price == Decimal("9000")

    def test_sale_price_above_base_ignored(self):
        assert _item(sale_price=Decimal("12000")).original_price == Decimal("10000")

    def test_zero_sale_price_ignored(self):
        assert _item(sale_price=Decimal("0")).original_price == Decimal("10000")

    def test_category_derived_when_omitted(self):
        assert _item().category is MotorCategory.MID_RANGE

    def test_negative_base_price_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            _item(base_price=Decimal("-1"))

    def test_float_price_rejected(self):
        with pytest.raises(TypeError, match="Decimal"):
            _item(base_price=10000.0)

    def test_dict_round_trip(self):
        item = _item(sale_price=Decimal("9500"), motor_type="Tiller", year=2025)
        assert CatalogItem.from_dict(item.to_dict()) == item


class TestDerivedFields:
    @pytest.mark.parametrize(
        "hp,expected",
        [
            ("2.5", MotorCategory.PORTABLE),
            ("30", MotorCategory.PORTABLE),
            ("60", MotorCategory.MID_RANGE),
            ("200", MotorCategory.HIGH_PERFORMANCE),
            ("350", MotorCategory.V8_RACING),
        ],
    )
    def test_derive_category(self, hp, expected):
        assert derive_category(Decimal(hp)) is expected

    def test_map_stock_status(self):
        assert map_stock_status("Sold") is StockStatus.SOLD
        assert map_stock_status("On Order") is StockStatus.ON_ORDER
        assert map_stock_status(None) is StockStatus.IN_STOCK
        assert map_stock_status("whatever") is StockStatus.IN_STOCK


class TestQuotability:
    def test_jet_excluded(self):
        assert not is_quotable(_item(model="80 Jet ELPT"))

    def test_over_300_hp_excluded(self):
        assert not is_quotable(_item(horsepower=Decimal("350")))

    def test_300_hp_allowed(self):
        assert is_quotable(_item(horsepower=Decimal("300")))

    def test_small_tiller(self):
        assert is_small_tiller(_item(horsepower=Decimal("9.9"), motor_type="Tiller"))
        assert not is_small_tiller(_item(horsepower=Decimal("15"), motor_type="Tiller"))
        assert not is_small_tiller(_item(horsepower=Decimal("9.9"), motor_type="Remote"))


class TestCatalogRecord:
    def test_parses_inventory_row(self):
        item = catalog_item_from_record({
            "id": 42,
            "model": "9.9 MH FourStroke",
            "horsepower": "9.9",
            "base_price": 3200,
            "sale_price": "",
            "motor_type": "Tiller",
            "year": "2025",
            "availability": "Order Now",
        })
        assert item.item_id == "42"
        assert item.horsepower == Decimal("9.9")
        assert item.sale_price is None
        assert item.year == 2025
        assert item.stock_status is StockStatus.ORDER_NOW
        assert item.category is MotorCategory.PORTABLE

    def test_missing_model_raises(self):
        with pytest.raises(ValueError, match="model"):
            catalog_item_from_record({"id": "1", "horsepower": 10})

    def test_missing_horsepower_raises(self):
        with pytest.raises(ValueError, match="horsepower"):
            catalog_item_from_record({"id": "1", "model": "X"})


class TestSpecSheet:
    def test_brackets_by_horsepower(self):
        sheet = match_spec_sheet(_item())
        assert sheet.item_id == "m-115"
        assert sheet.recommended_boat_size == "20-24ft"
        assert sheet.estimated_speed == "45-50 mph"

    def test_catch_all_bracket(self):
        sheet = match_spec_sheet(_item(horsepower=Decimal("250")))
        assert sheet.recommended_boat_size == "26ft+"

    @pytest.mark.parametrize(
        "model,expected",
        [
            ("150 XL Pro XS", '25" (XL) transom'),
            ("300 XXL Verado", '30" (XXL) transom'),
            ("115 ELPT FourStroke", '20" (L) transom'),
            ("9.9 MH", '15" (S) transom'),
        ],
    )
    def test_transom_requirement(self, model, expected):
        assert transom_requirement(model) == expected
