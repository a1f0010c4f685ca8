"""Tests for the CartItem aggregate: frozen vs recomputed totals."""

import pytest
from protean.exceptions import ValidationError

from florist.cart.events import CartItemUpdated, ItemAddedToCart
from florist.cart.item import CartItem
from florist.cart.snapshot import CartSnapshot, SnapshotLine
from florist.catalogue.bouquet import Bouquet
from florist.pricing.catalog import InMemoryMaterialCatalog
from florist.pricing.engine import PricingEngine


@pytest.fixture()
def catalog():
    catalog = InMemoryMaterialCatalog()
    catalog.put("rose", "Red Rose", 5000)
    catalog.put("tulip", "Tulip", 3000)
    return catalog


@pytest.fixture()
def engine(catalog):
    return PricingEngine(catalog)


@pytest.fixture()
def bouquet():
    return Bouquet.create(
        name="Red Romance",
        materials_by_size={"small": [{"material_id": "rose", "quantity": 3}]},
        base_price_by_size={"small": 17000},
        service_fee=2000,
        image_url="https://cdn.example.test/red.jpg",
    )


def _add(bouquet, engine, quantity=2, custom_materials=None):
    total = engine.compute_line_item_total(bouquet.materials_by_size, "small", quantity, custom_materials, 2000)
    return CartItem.add(
        owner_id="user-1",
        bouquet=bouquet,
        size="small",
        quantity=quantity,
        total_price=total,
        custom_materials=custom_materials,
    )


class TestCartItemAdd:
    def test_copies_bouquet_data(self, bouquet, engine):
        item = _add(bouquet, engine)
        assert item.bouquet_id == bouquet.id
        assert item.name == "Red Romance"
        assert item.image_url == "https://cdn.example.test/red.jpg"
        assert item.service_price == 2000
        assert item.total_price == 34000
        assert item.photos() == []
        assert item.custom_entries() == []

    def test_raises_event(self, bouquet, engine):
        item = _add(bouquet, engine)
        event = item._events[0]
        assert isinstance(event, ItemAddedToCart)
        assert event.total_price == 34000

    def test_quantity_must_be_positive(self, bouquet):
        with pytest.raises(ValidationError):
            CartItem.add(owner_id="user-1", bouquet=bouquet, size="small", quantity=0, total_price=0)

    def test_negative_custom_quantity_rejected(self, bouquet):
        with pytest.raises(ValidationError):
            CartItem.add(
                owner_id="user-1",
                bouquet=bouquet,
                size="small",
                quantity=1,
                total_price=0,
                custom_materials=[{"material_id": "tulip", "quantity": -2}],
            )


class TestFrozenVersusRecomputed:
    def test_frozen_total_ignores_price_changes(self, bouquet, engine, catalog):
        item = _add(bouquet, engine)
        catalog.put("rose", "Red Rose", 6000)

        assert item.frozen_total() == 34000
        assert item.recompute_total(engine, bouquet) == (18000 + 2000) * 2
        assert item.total_price == 34000

    def test_recompute_includes_custom_materials(self, bouquet, engine):
        item = _add(bouquet, engine, quantity=1, custom_materials=[{"material_id": "tulip", "quantity": 2}])
        assert item.recompute_total(engine, bouquet) == 15000 + 6000 + 2000

    def test_recompute_uses_stored_service_price(self, bouquet, engine):
        item = _add(bouquet, engine)
        bouquet.change_composition(bouquet.materials_by_size, 9000, {"small": 24000})
        assert item.recompute_total(engine, bouquet) == 34000

    def test_reprice_updates_total(self, bouquet, engine):
        item = _add(bouquet, engine)
        item._events.clear()

        item.update(quantity=3)
        item.reprice(item.recompute_total(engine, bouquet))
        assert item.total_price == 51000
        assert isinstance(item._events[0], CartItemUpdated)


class TestCartSnapshot:
    def test_lines_carry_frozen_totals(self, bouquet, engine, catalog):
        item = _add(bouquet, engine)
        catalog.put("rose", "Red Rose", 9000)

        line = SnapshotLine.from_cart_item(item)
        snapshot = CartSnapshot(owner_id="user-1", lines=(line,))
        assert snapshot.subtotal == 34000
        assert snapshot.cart_item_ids == [str(item.id)]
        assert not snapshot.is_empty

    def test_empty(self):
        assert CartSnapshot(owner_id="user-1").is_empty
