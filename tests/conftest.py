import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def _florist_domain(request):
    """Initialize the florist domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from florist.domain import florist

    florist.init()
    return florist


@pytest.fixture(scope="session", autouse=True)
def setup_db(_florist_domain):
    from florist.utils.db import drop_db, setup_db

    setup_db(_florist_domain)

    yield

    drop_db(_florist_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_florist_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _florist_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    from florist.notifications.channel import reset_push_gateway
    from florist.payments.gateway import reset_gateway

    reset_gateway()
    reset_push_gateway()

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def fake_gateway():
    """A fresh FakeGateway installed as the active payment gateway."""
    from florist.payments.gateway import set_gateway
    from florist.payments.gateway.fake_adapter import FakeGateway

    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def fake_push():
    """A fresh FakePushGateway installed as the active push adapter."""
    from florist.notifications.channel import set_push_gateway
    from florist.notifications.channel.fake_push import FakePushGateway

    gateway = FakePushGateway()
    set_push_gateway(gateway)
    return gateway


# ---------------------------------------------------------------------------
# Catalogue data
# ---------------------------------------------------------------------------
@pytest.fixture()
def rose_bouquet():
    """Materials rose=5000, paper=1000, ribbon=500 and a bouquet using them.

    small: 2 rose + 1 paper + 1 ribbon, medium: 5 rose + 2 paper + 1 ribbon,
    service fee 2000.
    """
    import json

    from protean import current_domain

    from florist.catalogue.composition import CreateBouquet
    from florist.catalogue.materials import AddMaterial

    materials = (
        ("rose", "Red Rose", 5000),
        ("paper", "Kraft Paper", 1000),
        ("ribbon", "Satin Ribbon", 500),
    )
    for material_id, name, price in materials:
        current_domain.process(
            AddMaterial(material_id=material_id, name=name, price=price, category="flower"),
            asynchronous=False,
        )

    composition = {
        "small": [
            {"material_id": "rose", "quantity": 2},
            {"material_id": "paper", "quantity": 1},
            {"material_id": "ribbon", "quantity": 1},
        ],
        "medium": [
            {"material_id": "rose", "quantity": 5},
            {"material_id": "paper", "quantity": 2},
            {"material_id": "ribbon", "quantity": 1},
        ],
    }
    bouquet_id = current_domain.process(
        CreateBouquet(
            name="Red Romance",
            category="rose",
            service_fee=2000,
            is_customizable=True,
            materials_by_size=json.dumps(composition),
        ),
        asynchronous=False,
    )
    return bouquet_id
