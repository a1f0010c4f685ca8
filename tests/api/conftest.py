import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from florist.api import (
    account_router,
    bouquet_router,
    cart_router,
    device_token_router,
    material_router,
    order_router,
    payment_router,
)
from florist.api.errors import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (
        material_router,
        bouquet_router,
        cart_router,
        order_router,
        payment_router,
        device_token_router,
        account_router,
    ):
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def catalogue(client):
    """Create rose/paper materials and a two-size bouquet through the API."""
    client.post("/materials", json={"material_id": "rose", "name": "Red Rose", "price": 5000})
    client.post("/materials", json={"material_id": "paper", "name": "Kraft Paper", "price": 1000})
    response = client.post(
        "/bouquets",
        json={
            "name": "Red Romance",
            "service_fee": 2000,
            "materials_by_size": {
                "small": [{"material_id": "rose", "quantity": 3}],
                "large": [{"material_id": "rose", "quantity": 6}, {"material_id": "paper", "quantity": 2}],
            },
        },
    )
    return response.json()["data"]["bouquet_id"]
