"""Order aggregate: a frozen copy of a cart plus its fulfillment and payment state.

Line items and totals are copied from the cart when the order is placed
and never change afterwards. Only the status fields and the cart-clearing
marker are written after placement.

Status changes come from two places:

- staff updates, checked against ``_ADMIN_TRANSITIONS``;
- payment webhooks, translated by ``map_provider_status`` and applied
  idempotently (a replayed notification changes nothing).
"""

import json
import secrets
import time
from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, Text

from florist.domain import florist
from florist.order.status import KNOWN_STATUSES, OrderStatus, map_provider_status


class DeliveryMethod(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


# Staff may currently move an order from any status to any known status.
# Tighten by editing the target sets.
_ADMIN_TRANSITIONS = {status.value: frozenset(KNOWN_STATUSES) for status in OrderStatus}

# Webhooks can leave an order in a raw provider status (e.g. "capture").
_UNLISTED_SOURCE_TARGETS = frozenset(KNOWN_STATUSES)


def new_order_id() -> str:
    """``ORDER-<epoch ms>-<random hex>``, also used as the gateway's order id."""
    return f"ORDER-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def validate_delivery(delivery_method, address, shipping_fee):
    """Reject incomplete delivery details before anything is written."""
    if delivery_method not in {method.value for method in DeliveryMethod}:
        raise ValidationError({"delivery_method": [f"Unknown delivery method '{delivery_method}'"]})

    if delivery_method == DeliveryMethod.DELIVERY.value:
        errors = {}
        if not (address or "").strip():
            errors["address"] = ["Address is required for delivery"]
        if shipping_fee is None:
            errors["shipping_fee"] = ["Shipping fee is required for delivery"]
        if errors:
            raise ValidationError(errors)


@florist.entity(part_of="Order")
class OrderLineItem:
    """Frozen copy of one cart item at the time the order was placed."""

    cart_item_id: Identifier()
    bouquet_id: Identifier(required=True)
    name: String(max_length=255)
    size: String(required=True, max_length=30)
    quantity: Integer(required=True, min_value=1)
    service_price: Integer(min_value=0, default=0)
    total_price: Integer(required=True, min_value=0)
    custom_materials: Text()  # JSON: [{material_id, quantity}]
    image_url: String(max_length=500)
    request_date: String(max_length=50)
    order_note: Text()
    photo_urls: Text()  # JSON: [url]


@florist.aggregate
class Order:
    owner_id: Identifier(required=True)
    customer_name: String(max_length=255)
    customer_email: String(max_length=255)
    customer_phone: String(max_length=50)
    delivery_method: String(choices=DeliveryMethod, required=True)
    address: Text()
    shipping_fee: Integer(min_value=0, default=0)
    payment_method: String(required=True, max_length=50)
    payment_type: String(max_length=50)
    total_price: Integer(required=True, min_value=0)
    line_items: HasMany(OrderLineItem)
    status: String(required=True, max_length=50)
    provider_status: String(max_length=50)
    fraud_status: String(max_length=50)
    payment_channel: String(max_length=50)
    paid_at: DateTime()
    payment_token: String(max_length=255)
    payment_redirect_url: String(max_length=500)
    transaction_id: String(max_length=255)
    cart_item_ids: Text()  # JSON: [cart_item_id]
    cart_cleared: Boolean(default=False)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def delivery_requires_an_address(self):
        if self.delivery_method == DeliveryMethod.DELIVERY.value and not (self.address or "").strip():
            raise ValidationError({"address": ["Address is required for delivery"]})

    def item_names(self) -> list[str]:
        return [item.name for item in self.line_items if item.name]

    def pending_cart_item_ids(self) -> list[str]:
        return json.loads(self.cart_item_ids) if self.cart_item_ids else []

    @classmethod
    def place(
        cls,
        order_id,
        owner_id,
        snapshot,
        delivery_method,
        payment_method,
        initial_status,
        address=None,
        shipping_fee=None,
        customer_name=None,
        customer_email=None,
        customer_phone=None,
        payment_type=None,
        payment=None,
    ):
        """Create an order from a ``CartSnapshot``.

        ``payment`` is the gateway's ``TransactionResult`` for non-cash
        orders. Pickup orders never carry a shipping fee.
        """
        from florist.order.events import OrderPlaced

        validate_delivery(delivery_method, address, shipping_fee)
        fee = 0 if delivery_method == DeliveryMethod.PICKUP.value else shipping_fee
        now = datetime.now()

        line_items = [
            OrderLineItem(
                cart_item_id=line.cart_item_id,
                bouquet_id=line.bouquet_id,
                name=line.name,
                size=line.size,
                quantity=line.quantity,
                service_price=line.service_price,
                total_price=line.total_price,
                custom_materials=json.dumps(list(line.custom_materials)),
                image_url=line.image_url,
                request_date=line.request_date,
                order_note=line.order_note,
                photo_urls=json.dumps(list(line.photo_urls)),
            )
            for line in snapshot.lines
        ]

        order = cls(
            id=order_id,
            owner_id=owner_id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            delivery_method=delivery_method,
            address=address if delivery_method == DeliveryMethod.DELIVERY.value else None,
            shipping_fee=fee,
            payment_method=payment_method,
            payment_type=payment_type,
            total_price=snapshot.subtotal + fee,
            line_items=line_items,
            status=initial_status,
            payment_token=payment.token if payment else None,
            payment_redirect_url=payment.redirect_url if payment else None,
            transaction_id=payment.transaction_id if payment else None,
            cart_item_ids=json.dumps(snapshot.cart_item_ids),
            cart_cleared=False,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                owner_id=owner_id,
                customer_name=customer_name,
                total_price=order.total_price,
                status=initial_status,
                payment_method=payment_method,
                delivery_method=delivery_method,
                item_names=json.dumps(order.item_names()),
                placed_at=now,
            )
        )
        return order

    def _assert_can_transition(self, target_status):
        """Validate that the current status allows a staff transition to target."""
        allowed = _ADMIN_TRANSITIONS.get(self.status, _UNLISTED_SOURCE_TARGETS)
        if target_status not in allowed:
            raise ValidationError({"status": [f"Cannot transition from {self.status} to {target_status}"]})

    def _status_changed(self, previous_status, source):
        from florist.order.events import OrderStatusChanged

        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                owner_id=self.owner_id,
                previous_status=previous_status,
                status=self.status,
                source=source,
                customer_name=self.customer_name,
                item_names=json.dumps(self.item_names()),
                changed_at=self.updated_at,
            )
        )

    def change_status(self, new_status):
        """Staff update. Always recorded and announced, even when the status is unchanged."""
        self._assert_can_transition(new_status)

        previous_status = self.status
        self.status = new_status
        self.updated_at = datetime.now()
        self._status_changed(previous_status, source="staff")

    def apply_payment_notification(
        self,
        transaction_status,
        fraud_status=None,
        payment_channel=None,
        settled_at=None,
    ) -> bool:
        """Apply a gateway webhook. Returns False when the notification changes nothing."""
        new_status = map_provider_status(transaction_status)
        if (
            new_status == self.status
            and transaction_status == self.provider_status
            and fraud_status == self.fraud_status
        ):
            return False

        previous_status = self.status
        self.status = new_status
        self.provider_status = transaction_status
        self.fraud_status = fraud_status
        if payment_channel:
            self.payment_channel = payment_channel
        if new_status == OrderStatus.PAID.value and self.paid_at is None:
            self.paid_at = settled_at or datetime.now()
        self.updated_at = datetime.now()

        self._status_changed(previous_status, source="payment")
        return True

    def mark_cart_cleared(self) -> bool:
        from florist.order.events import OrderCartCleared

        if self.cart_cleared:
            return False

        self.cart_cleared = True
        self.updated_at = datetime.now()
        self.raise_(OrderCartCleared(order_id=self.id, owner_id=self.owner_id))
        return True
