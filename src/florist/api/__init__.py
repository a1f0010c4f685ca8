"""Florist API package."""

from florist.api.routes import (
    account_router,
    bouquet_router,
    cart_router,
    device_token_router,
    material_router,
    order_router,
    payment_router,
)

__all__ = [
    "material_router",
    "bouquet_router",
    "cart_router",
    "order_router",
    "payment_router",
    "device_token_router",
    "account_router",
]
