"""Pydantic request/response schemas for the florist API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Every response uses the same envelope:
``{"status": "success" | "fail" | "error", "message": ..., "data": ...}``.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
class ApiResponse(BaseModel):
    status: Literal["success", "fail", "error"] = "success"
    message: str | None = None
    data: Any = None


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class MaterialEntrySchema(BaseModel):
    material_id: str = Field(min_length=1)
    quantity: int = Field(ge=0, default=0)


class CustomerSchema(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class AddMaterialRequest(BaseModel):
    material_id: str | None = None
    name: str
    category: str | None = None
    price: int = Field(ge=0)
    image_url: str | None = None


class UpdateMaterialRequest(BaseModel):
    price: int | None = Field(ge=0, default=None)
    name: str | None = None
    category: str | None = None
    image_url: str | None = None


class CreateBouquetRequest(BaseModel):
    name: str
    description: str | None = None
    category: str | None = None
    bouquet_type: Literal["template", "custom"] = "template"
    requires_photo: bool = False
    is_customizable: bool = False
    processing_time_days: int = Field(ge=0, default=1)
    service_fee: int = Field(ge=0, default=0)
    image_url: str | None = None
    materials_by_size: dict[str, list[MaterialEntrySchema]]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Rose Bouquet",
                    "category": "rose",
                    "service_fee": 2000,
                    "materials_by_size": {"small": [{"material_id": "rose", "quantity": 3}]},
                }
            ]
        }
    }


class UpdateBouquetCompositionRequest(BaseModel):
    materials_by_size: dict[str, list[MaterialEntrySchema]] | None = None
    service_fee: int | None = Field(ge=0, default=None)


class UpdateBouquetDetailsRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    bouquet_type: Literal["template", "custom"] | None = None
    requires_photo: bool | None = None
    is_customizable: bool | None = None
    processing_time_days: int | None = Field(ge=0, default=None)
    image_url: str | None = None


class SubmitReviewRequest(BaseModel):
    reviewer_id: str = Field(min_length=1)
    reviewer_name: str | None = None
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    bouquet_id: str
    size: str
    quantity: int = Field(ge=1, default=1)
    custom_materials: list[MaterialEntrySchema] = Field(default_factory=list)
    request_date: str | None = None
    order_note: str | None = None
    photo_urls: list[str] = Field(default_factory=list)
    name: str | None = None
    image_url: str | None = None


class UpdateCartItemRequest(BaseModel):
    size: str | None = None
    quantity: int | None = Field(ge=1, default=None)
    custom_materials: list[MaterialEntrySchema] | None = None
    request_date: str | None = None
    order_note: str | None = None
    photo_urls: list[str] | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    owner_id: str
    delivery_method: Literal["pickup", "delivery"]
    payment_method: str
    address: str | None = None
    shipping_fee: int | None = Field(ge=0, default=None)
    payment_type: Literal["bank_transfer", "gopay", "qris", "echannel"] | None = None
    bank: str | None = None
    customer: CustomerSchema | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Gateway unavailable"


# ---------------------------------------------------------------------------
# Device tokens & accounts
# ---------------------------------------------------------------------------
class DeviceTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class RegisterAccountRequest(BaseModel):
    account_id: str | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    role: str | None = None


class ChangeRoleRequest(BaseModel):
    role: str = Field(min_length=1)
