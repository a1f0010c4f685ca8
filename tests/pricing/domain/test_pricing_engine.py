"""Tests for the pricing engine over an in-memory material catalog."""

import json

import pytest

from florist.errors import MaterialNotFound
from florist.pricing.catalog import InMemoryMaterialCatalog
from florist.pricing.engine import MaterialEntry, PricingEngine, parse_bill_of_materials, parse_entries


@pytest.fixture()
def catalog():
    catalog = InMemoryMaterialCatalog()
    catalog.put("rose", "Red Rose", 5000)
    catalog.put("tulip", "Tulip", 3000)
    catalog.put("paper", "Kraft Paper", 1000)
    return catalog


@pytest.fixture()
def engine(catalog):
    return PricingEngine(catalog)


class TestParseEntries:
    def test_accepts_json_string(self):
        entries = parse_entries('[{"material_id": "rose", "quantity": 3}]')
        assert entries == [MaterialEntry(material_id="rose", quantity=3)]

    def test_accepts_camel_case_material_id(self):
        entries = parse_entries([{"materialId": "rose", "quantity": 2}])
        assert entries == [MaterialEntry(material_id="rose", quantity=2)]

    def test_missing_quantity_counts_as_zero(self):
        entries = parse_entries([{"material_id": "rose"}])
        assert entries[0].quantity == 0

    def test_entries_without_material_are_dropped(self):
        assert parse_entries([{"quantity": 4}]) == []

    def test_empty_input(self):
        assert parse_entries(None) == []
        assert parse_entries([]) == []

    def test_strict_parse_rejects_entries_without_material(self):
        with pytest.raises(MaterialNotFound):
            parse_entries([{"material_id": "", "quantity": 4}], strict=True)

    def test_bill_of_materials_lower_cases_sizes(self):
        assert list(parse_bill_of_materials({"Large": [], " MEDIUM ": []})) == ["large", "medium"]

    def test_bill_of_materials_from_json(self):
        bom = parse_bill_of_materials(json.dumps({"small": [{"material_id": "rose", "quantity": 1}]}))
        assert list(bom) == ["small"]
        assert bom["small"][0].material_id == "rose"


class TestBasePriceBySize:
    def test_single_size(self, engine):
        prices = engine.compute_base_price_by_size({"small": [{"material_id": "rose", "quantity": 3}]}, 2000)
        assert prices == {"small": 17000}

    def test_service_fee_added_once_per_size(self, engine):
        prices = engine.compute_base_price_by_size(
            {
                "small": [{"material_id": "rose", "quantity": 1}],
                "large": [
                    {"material_id": "rose", "quantity": 5},
                    {"material_id": "paper", "quantity": 2},
                ],
            },
            1500,
        )
        assert prices == {"small": 6500, "large": 28500}

    def test_missing_service_fee_counts_as_zero(self, engine):
        prices = engine.compute_base_price_by_size({"small": [{"material_id": "tulip", "quantity": 2}]}, None)
        assert prices == {"small": 6000}

    def test_size_with_no_materials_costs_the_fee(self, engine):
        assert engine.compute_base_price_by_size({"mini": []}, 2000) == {"mini": 2000}

    def test_missing_material_aborts(self, engine):
        with pytest.raises(MaterialNotFound):
            engine.compute_base_price_by_size(
                {
                    "small": [{"material_id": "rose", "quantity": 1}],
                    "large": [{"material_id": "orchid", "quantity": 1}],
                },
                2000,
            )

    def test_entry_without_material_id_aborts(self, engine):
        with pytest.raises(MaterialNotFound):
            engine.compute_base_price_by_size({"small": [{"material_id": "", "quantity": 3}]}, 2000)

        with pytest.raises(MaterialNotFound):
            engine.compute_base_price_by_size(
                {"small": [{"material_id": "rose", "quantity": 1}, {"quantity": 2}]},
                2000,
            )

    def test_size_names_normalized(self, engine):
        prices = engine.compute_base_price_by_size({" Small ": [{"material_id": "rose", "quantity": 3}]}, 2000)
        assert prices == {"small": 17000}

    def test_reads_current_prices(self, engine, catalog):
        composition = {"small": [{"material_id": "rose", "quantity": 2}]}
        assert engine.compute_base_price_by_size(composition, 0) == {"small": 10000}

        catalog.put("rose", "Red Rose", 6000)
        assert engine.compute_base_price_by_size(composition, 0) == {"small": 12000}


class TestLineItemTotal:
    def test_worked_example(self, engine):
        total = engine.compute_line_item_total(
            {"small": [{"material_id": "rose", "quantity": 3}]},
            "small",
            2,
            [],
            2000,
        )
        assert total == 34000

    def test_custom_materials_priced_on_top(self, engine):
        total = engine.compute_line_item_total(
            {"small": [{"material_id": "rose", "quantity": 3}]},
            "small",
            1,
            [{"material_id": "tulip", "quantity": 2}],
            2000,
        )
        assert total == 15000 + 6000 + 2000

    def test_missing_materials_are_skipped(self, engine):
        total = engine.compute_line_item_total(
            {"small": [{"material_id": "rose", "quantity": 3}, {"material_id": "orchid", "quantity": 9}]},
            "small",
            1,
            [{"material_id": "lily", "quantity": 4}],
            2000,
        )
        assert total == 17000

    def test_unknown_size_prices_only_custom_and_service(self, engine):
        total = engine.compute_line_item_total(
            {"small": [{"material_id": "rose", "quantity": 3}]},
            "huge",
            2,
            [{"material_id": "paper", "quantity": 1}],
            500,
        )
        assert total == (1000 + 500) * 2

    def test_quote_breakdown(self, engine):
        quote = engine.quote_line_item(
            {"small": [{"material_id": "rose", "quantity": 3}]},
            "small",
            2,
            [{"material_id": "paper", "quantity": 1}],
            2000,
        )
        assert [line.material_id for line in quote.standard] == ["rose"]
        assert quote.standard[0].subtotal == 15000
        assert [line.name for line in quote.custom] == ["Kraft Paper"]
        assert quote.materials_total == 16000
        assert quote.unit_price == 18000
        assert quote.total == 36000

    def test_price_for_size(self, engine):
        price = engine.price_for_size({"small": [{"material_id": "rose", "quantity": 3}]}, "small", 2000)
        assert price == 17000

    def test_size_lookup_ignores_case(self, engine):
        bill_of_materials = {"Small": [{"material_id": "rose", "quantity": 3}]}
        assert engine.compute_line_item_total(bill_of_materials, "SMALL", 1, [], 2000) == 17000

    def test_entry_without_material_id_skipped(self, engine):
        total = engine.compute_line_item_total(
            {"small": [{"material_id": "rose", "quantity": 3}, {"material_id": " ", "quantity": 5}]},
            "small",
            1,
            [],
            2000,
        )
        assert total == 17000
