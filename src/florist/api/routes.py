"""FastAPI routes for the florist backend.

Routes translate requests into domain commands and queries; no business
rules live here. Commands are processed synchronously.
"""

import json
import os

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from florist.accounts.management import ChangeAccountRole, RegisterAccount
from florist.api.schemas import (
    AddMaterialRequest,
    AddToCartRequest,
    ApiResponse,
    ChangeRoleRequest,
    ConfigureGatewayRequest,
    CreateBouquetRequest,
    DeviceTokenRequest,
    PlaceOrderRequest,
    RegisterAccountRequest,
    SubmitReviewRequest,
    UpdateBouquetCompositionRequest,
    UpdateBouquetDetailsRequest,
    UpdateCartItemRequest,
    UpdateMaterialRequest,
    UpdateOrderStatusRequest,
)
from florist.cart.listing import cart_view
from florist.cart.management import AddToCart, RemoveFromCart, UpdateCartItem
from florist.catalogue.composition import CreateBouquet, UpdateBouquetComposition
from florist.catalogue.details import RemoveBouquet, UpdateBouquetDetails
from florist.catalogue.materials import (
    AddMaterial,
    RemoveMaterial,
    UpdateMaterialDetails,
    UpdateMaterialPrice,
    load_material,
)
from florist.catalogue.queries import bouquet_detail, list_bouquets, list_materials, material_view
from florist.notifications.tokens.management import RegisterDeviceToken, UnregisterDeviceToken
from florist.order.cart_clearing import ClearOrderCart
from florist.order.checkout import checkout
from florist.order.fulfillment import UpdateOrderStatus
from florist.order.payment import notification_from_webhook
from florist.order.placement import PlaceOrder
from florist.order.queries import DEFAULT_LIMIT, get_order, list_orders, orders_for_owner
from florist.payments.gateway import get_gateway
from florist.payments.gateway.fake_adapter import FakeGateway
from florist.reviews.queries import DEFAULT_REVIEW_LIMIT, MAX_REVIEW_LIMIT, reviews_for_bouquet
from florist.reviews.submission import SubmitReview


def _entries(entries) -> str:
    return json.dumps([entry.model_dump() for entry in entries])


def _composition(materials_by_size) -> str:
    return json.dumps({size: [entry.model_dump() for entry in entries] for size, entries in materials_by_size.items()})


# ---------------------------------------------------------------------------
# Material Router
# ---------------------------------------------------------------------------
material_router = APIRouter(prefix="/materials", tags=["materials"])


@material_router.post("", status_code=201, response_model=ApiResponse)
async def add_material(body: AddMaterialRequest) -> ApiResponse:
    command = AddMaterial(
        material_id=body.material_id,
        name=body.name,
        category=body.category,
        price=body.price,
        image_url=body.image_url,
    )
    material_id = current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Material added", data={"material_id": material_id})


@material_router.get("", response_model=ApiResponse)
async def get_materials() -> ApiResponse:
    return ApiResponse(data=list_materials())


@material_router.get("/{material_id}", response_model=ApiResponse)
async def get_material(material_id: str) -> ApiResponse:
    return ApiResponse(data=material_view(load_material(material_id)))


@material_router.put("/{material_id}", response_model=ApiResponse)
async def update_material(material_id: str, body: UpdateMaterialRequest) -> ApiResponse:
    if body.price is not None:
        current_domain.process(UpdateMaterialPrice(material_id=material_id, price=body.price), asynchronous=False)
    if any(value is not None for value in (body.name, body.category, body.image_url)):
        command = UpdateMaterialDetails(
            material_id=material_id,
            name=body.name,
            category=body.category,
            image_url=body.image_url,
        )
        current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Material updated")


@material_router.delete("/{material_id}", response_model=ApiResponse)
async def remove_material(material_id: str) -> ApiResponse:
    current_domain.process(RemoveMaterial(material_id=material_id), asynchronous=False)
    return ApiResponse(message="Material removed")


# ---------------------------------------------------------------------------
# Bouquet Router
# ---------------------------------------------------------------------------
bouquet_router = APIRouter(prefix="/bouquets", tags=["bouquets"])


@bouquet_router.post("", status_code=201, response_model=ApiResponse)
async def create_bouquet(body: CreateBouquetRequest) -> ApiResponse:
    command = CreateBouquet(
        name=body.name,
        description=body.description,
        category=body.category,
        bouquet_type=body.bouquet_type,
        requires_photo=body.requires_photo,
        is_customizable=body.is_customizable,
        processing_time_days=body.processing_time_days,
        service_fee=body.service_fee,
        image_url=body.image_url,
        materials_by_size=_composition(body.materials_by_size),
    )
    bouquet_id = current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Bouquet created", data=bouquet_detail(bouquet_id))


@bouquet_router.get("", response_model=ApiResponse)
async def get_bouquets() -> ApiResponse:
    return ApiResponse(data=list_bouquets())


@bouquet_router.get("/{bouquet_id}", response_model=ApiResponse)
async def get_bouquet(bouquet_id: str, size: str | None = Query(default=None)) -> ApiResponse:
    """Bouquet priced for ``size`` (default ``small``) at current material prices."""
    return ApiResponse(data=bouquet_detail(bouquet_id, size))


@bouquet_router.put("/{bouquet_id}/composition", response_model=ApiResponse)
async def update_bouquet_composition(bouquet_id: str, body: UpdateBouquetCompositionRequest) -> ApiResponse:
    command = UpdateBouquetComposition(
        bouquet_id=bouquet_id,
        materials_by_size=_composition(body.materials_by_size) if body.materials_by_size is not None else None,
        service_fee=body.service_fee,
    )
    current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Bouquet repriced", data=bouquet_detail(bouquet_id))


@bouquet_router.put("/{bouquet_id}", response_model=ApiResponse)
async def update_bouquet_details(bouquet_id: str, body: UpdateBouquetDetailsRequest) -> ApiResponse:
    command = UpdateBouquetDetails(bouquet_id=bouquet_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Bouquet updated")


@bouquet_router.delete("/{bouquet_id}", response_model=ApiResponse)
async def remove_bouquet(bouquet_id: str) -> ApiResponse:
    current_domain.process(RemoveBouquet(bouquet_id=bouquet_id), asynchronous=False)
    return ApiResponse(message="Bouquet removed")


@bouquet_router.post("/{bouquet_id}/reviews", status_code=201, response_model=ApiResponse)
async def submit_review(bouquet_id: str, body: SubmitReviewRequest) -> ApiResponse:
    command = SubmitReview(
        bouquet_id=bouquet_id,
        reviewer_id=body.reviewer_id,
        reviewer_name=body.reviewer_name,
        rating=body.rating,
        comment=body.comment,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Review submitted", data={"review_id": review_id})


@bouquet_router.get("/{bouquet_id}/reviews", response_model=ApiResponse)
async def get_bouquet_reviews(
    bouquet_id: str,
    limit: int = Query(default=DEFAULT_REVIEW_LIMIT, ge=1, le=MAX_REVIEW_LIMIT),
) -> ApiResponse:
    """Rating summary and the newest reviews of a bouquet."""
    return ApiResponse(data=reviews_for_bouquet(bouquet_id, limit=limit))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("/{owner_id}/items", status_code=201, response_model=ApiResponse)
async def add_cart_item(owner_id: str, body: AddToCartRequest) -> ApiResponse:
    command = AddToCart(
        owner_id=owner_id,
        bouquet_id=body.bouquet_id,
        size=body.size,
        quantity=body.quantity,
        custom_materials=_entries(body.custom_materials),
        request_date=body.request_date,
        order_note=body.order_note,
        photo_urls=json.dumps(body.photo_urls),
        name=body.name,
        image_url=body.image_url,
    )
    cart_item_id = current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Item added to cart", data={"cart_item_id": cart_item_id})


@cart_router.get("/{owner_id}", response_model=ApiResponse)
async def get_cart(owner_id: str) -> ApiResponse:
    return ApiResponse(data=cart_view(owner_id))


@cart_router.put("/items/{cart_item_id}", response_model=ApiResponse)
async def update_cart_item(cart_item_id: str, body: UpdateCartItemRequest) -> ApiResponse:
    command = UpdateCartItem(
        cart_item_id=cart_item_id,
        size=body.size,
        quantity=body.quantity,
        custom_materials=_entries(body.custom_materials) if body.custom_materials is not None else None,
        request_date=body.request_date,
        order_note=body.order_note,
        photo_urls=json.dumps(body.photo_urls) if body.photo_urls is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Cart item updated")


@cart_router.delete("/items/{cart_item_id}", response_model=ApiResponse)
async def remove_cart_item(cart_item_id: str) -> ApiResponse:
    current_domain.process(RemoveFromCart(cart_item_id=cart_item_id), asynchronous=False)
    return ApiResponse(message="Cart item removed")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=ApiResponse)
async def place_order(body: PlaceOrderRequest) -> ApiResponse:
    """Place an order from the owner's cart, then clear the cart.

    ``cart_cleared`` is False when the order was stored but clearing the
    cart failed; retry with ``POST /orders/{order_id}/clear-cart``.
    """
    customer = body.customer
    command = PlaceOrder(
        owner_id=body.owner_id,
        delivery_method=body.delivery_method,
        payment_method=body.payment_method,
        address=body.address,
        shipping_fee=body.shipping_fee,
        payment_type=body.payment_type,
        bank=body.bank,
        customer_name=customer.name if customer else None,
        customer_email=customer.email if customer else None,
        customer_phone=customer.phone if customer else None,
    )
    result = checkout(command)
    message = "Order placed" if result.cart_cleared else "Order placed, cart not cleared yet"
    return ApiResponse(
        message=message,
        data={
            "order_id": result.order_id,
            "status": result.status,
            "total_price": result.total_price,
            "cart_cleared": result.cart_cleared,
            "payment_token": result.payment_token,
            "payment_redirect_url": result.payment_redirect_url,
        },
    )


@order_router.get("", response_model=ApiResponse)
async def get_orders(
    status: str | None = Query(default=None),
    owner_id: str | None = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=200),
) -> ApiResponse:
    return ApiResponse(data=list_orders(owner_id=owner_id, status=status, limit=limit))


@order_router.get("/owner/{owner_id}", response_model=ApiResponse)
async def get_owner_orders(owner_id: str, limit: int | None = Query(default=None, ge=1)) -> ApiResponse:
    return ApiResponse(data=orders_for_owner(owner_id, limit=limit))


@order_router.get("/{order_id}", response_model=ApiResponse)
async def get_order_detail(order_id: str) -> ApiResponse:
    return ApiResponse(data=get_order(order_id))


@order_router.put("/{order_id}/status", response_model=ApiResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> ApiResponse:
    status = current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return ApiResponse(message=f"Order {order_id} status set to {status}", data={"status": status})


@order_router.post("/{order_id}/clear-cart", response_model=ApiResponse)
async def clear_order_cart(order_id: str) -> ApiResponse:
    current_domain.process(ClearOrderCart(order_id=order_id), asynchronous=False)
    return ApiResponse(message="Cart cleared", data={"cart_cleared": True})


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/notifications", response_model=ApiResponse)
async def payment_notification(body: dict) -> ApiResponse:
    """Process a payment gateway webhook callback."""
    if not get_gateway().verify_webhook_signature(body):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    changed = current_domain.process(notification_from_webhook(body), asynchronous=False)
    return ApiResponse(message="Notification processed", data={"changed": changed})


@payment_router.post("/gateway/configure", response_model=ApiResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> ApiResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return ApiResponse(
        data={
            "gateway": type(gateway).__name__,
            "should_succeed": gateway.should_succeed,
            "failure_reason": gateway.failure_reason,
        }
    )


# ---------------------------------------------------------------------------
# Device Token Router
# ---------------------------------------------------------------------------
device_token_router = APIRouter(prefix="/users", tags=["device-tokens"])


@device_token_router.post("/{user_id}/device-tokens", response_model=ApiResponse)
async def register_device_token(user_id: str, body: DeviceTokenRequest) -> ApiResponse:
    tokens = current_domain.process(RegisterDeviceToken(recipient_id=user_id, token=body.token), asynchronous=False)
    return ApiResponse(message="Device token registered", data={"count": len(tokens)})


@device_token_router.delete("/{user_id}/device-tokens", response_model=ApiResponse)
async def unregister_device_token(user_id: str, body: DeviceTokenRequest) -> ApiResponse:
    tokens = current_domain.process(UnregisterDeviceToken(recipient_id=user_id, token=body.token), asynchronous=False)
    return ApiResponse(message="Device token removed", data={"count": len(tokens)})


# ---------------------------------------------------------------------------
# Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/accounts", tags=["accounts"])


@account_router.post("", status_code=201, response_model=ApiResponse)
async def register_account(body: RegisterAccountRequest) -> ApiResponse:
    command = RegisterAccount(
        account_id=body.account_id,
        name=body.name,
        email=body.email,
        phone=body.phone,
        role=body.role,
    )
    account_id = current_domain.process(command, asynchronous=False)
    return ApiResponse(message="Account registered", data={"account_id": account_id})


@account_router.put("/{account_id}/role", response_model=ApiResponse)
async def change_account_role(account_id: str, body: ChangeRoleRequest) -> ApiResponse:
    current_domain.process(ChangeAccountRole(account_id=account_id, role=body.role), asynchronous=False)
    return ApiResponse(message="Role updated")
