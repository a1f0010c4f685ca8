"""Application tests for bouquet creation and repricing."""

import json

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from florist.catalogue.bouquet import Bouquet
from florist.catalogue.composition import CreateBouquet, UpdateBouquetComposition, parse_composition
from florist.catalogue.details import RemoveBouquet, UpdateBouquetDetails
from florist.catalogue.materials import AddMaterial, UpdateMaterialPrice
from florist.catalogue.queries import bouquet_detail, list_bouquets
from florist.errors import BouquetNotFound, MaterialNotFound


def _add_material(material_id, price):
    command = AddMaterial(material_id=material_id, name=material_id.title(), price=price)
    current_domain.process(command, asynchronous=False)


def _create(materials_by_size, service_fee=2000, **overrides):
    command = CreateBouquet(
        name=overrides.pop("name", "Red Romance"),
        service_fee=service_fee,
        materials_by_size=json.dumps(materials_by_size),
        **overrides,
    )
    return current_domain.process(command, asynchronous=False)


class TestCreateBouquet:
    def test_base_price_computed_on_create(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})

        bouquet = current_domain.repository_for(Bouquet).get(bouquet_id)
        assert bouquet.base_prices() == {"small": 17000}

    def test_missing_material_creates_nothing(self):
        _add_material("rose", 5000)
        with pytest.raises(MaterialNotFound):
            _create(
                {
                    "small": [{"material_id": "rose", "quantity": 3}],
                    "large": [{"material_id": "orchid", "quantity": 1}],
                }
            )
        assert list_bouquets() == []

    def test_entry_without_material_id_creates_nothing(self):
        _add_material("rose", 5000)
        with pytest.raises(MaterialNotFound):
            _create({"small": [{"material_id": "rose", "quantity": 1}, {"material_id": "", "quantity": 3}]})
        assert list_bouquets() == []

    def test_size_names_stored_lower_case(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"Small": [{"material_id": "rose", "quantity": 3}]})

        bouquet = current_domain.repository_for(Bouquet).get(bouquet_id)
        assert json.loads(bouquet.materials_by_size) == {"small": [{"material_id": "rose", "quantity": 3}]}
        assert bouquet.base_prices() == {"small": 17000}
        assert bouquet.offers_size("SMALL")
        assert bouquet_detail(bouquet_id)["price"] == 17000

    def test_duplicate_sizes_after_normalizing_rejected(self):
        with pytest.raises(ValidationError):
            parse_composition({"small": [], "Small": []})

    def test_invalid_json_rejected(self):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CreateBouquet(name="Broken", materials_by_size="{not json"),
                asynchronous=False,
            )
        assert "materials_by_size" in exc.value.messages

    def test_sizes_must_map_to_lists(self):
        with pytest.raises(ValidationError):
            parse_composition({"small": {"material_id": "rose"}})

    def test_empty_composition_rejected(self):
        with pytest.raises(ValidationError):
            parse_composition("{}")


class TestUpdateComposition:
    def test_new_materials_reprice_every_size(self):
        _add_material("rose", 5000)
        _add_material("paper", 1000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})

        current_domain.process(
            UpdateBouquetComposition(
                bouquet_id=bouquet_id,
                materials_by_size=json.dumps(
                    {
                        "small": [{"material_id": "rose", "quantity": 2}],
                        "large": [{"material_id": "rose", "quantity": 6}, {"material_id": "paper", "quantity": 2}],
                    }
                ),
            ),
            asynchronous=False,
        )
        bouquet = current_domain.repository_for(Bouquet).get(bouquet_id)
        assert bouquet.base_prices() == {"small": 12000, "large": 34000}

    def test_fee_change_alone_reprices_with_current_materials(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})
        current_domain.process(UpdateMaterialPrice(material_id="rose", price=6000), asynchronous=False)

        current_domain.process(UpdateBouquetComposition(bouquet_id=bouquet_id, service_fee=500), asynchronous=False)
        bouquet = current_domain.repository_for(Bouquet).get(bouquet_id)
        assert bouquet.service_fee == 500
        assert bouquet.base_prices() == {"small": 18500}

    def test_missing_material_leaves_bouquet_unchanged(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})

        with pytest.raises(MaterialNotFound):
            current_domain.process(
                UpdateBouquetComposition(
                    bouquet_id=bouquet_id,
                    materials_by_size=json.dumps({"small": [{"material_id": "orchid", "quantity": 1}]}),
                ),
                asynchronous=False,
            )
        bouquet = current_domain.repository_for(Bouquet).get(bouquet_id)
        assert bouquet.base_prices() == {"small": 17000}

    def test_unknown_bouquet(self):
        with pytest.raises(BouquetNotFound):
            current_domain.process(UpdateBouquetComposition(bouquet_id="missing", service_fee=1), asynchronous=False)


class TestBouquetReads:
    def test_detail_recomputes_at_current_prices(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})
        current_domain.process(UpdateMaterialPrice(material_id="rose", price=6000), asynchronous=False)

        detail = bouquet_detail(bouquet_id)
        assert detail["size"] == "small"
        assert detail["price"] == 20000
        assert detail["base_price"] == 18000
        assert detail["base_price_by_size"] == {"small": 17000}
        assert detail["materials"][0]["subtotal"] == 18000

    def test_detail_size_is_case_insensitive(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [], "large": [{"material_id": "rose", "quantity": 10}]})
        assert bouquet_detail(bouquet_id, "LARGE")["price"] == 52000

    def test_detail_unknown_size_prices_fee_only(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})
        detail = bouquet_detail(bouquet_id, "giant")
        assert detail["price"] == 2000
        assert detail["materials"] == []

    def test_details_update_and_remove(self):
        _add_material("rose", 5000)
        bouquet_id = _create({"small": [{"material_id": "rose", "quantity": 3}]})

        current_domain.process(
            UpdateBouquetDetails(bouquet_id=bouquet_id, name="Deep Red", processing_time_days=2),
            asynchronous=False,
        )
        summary = list_bouquets()[0]
        assert summary["name"] == "Deep Red"
        assert summary["processing_time_days"] == 2

        current_domain.process(RemoveBouquet(bouquet_id=bouquet_id), asynchronous=False)
        assert list_bouquets() == []
        with pytest.raises(BouquetNotFound):
            bouquet_detail(bouquet_id)
