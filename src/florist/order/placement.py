"""Order placement: freeze the customer's cart into an order.

Validation and the payment-gateway request happen before the order is
stored, so a rejected placement leaves neither an order nor a changed cart.
Removing the ordered items from the cart is a separate step
(``florist.order.cart_clearing``).
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from florist.cart.snapshot import CartSnapshot
from florist.config import get_settings
from florist.domain import florist
from florist.errors import UpstreamFailure
from florist.order.order import Order, new_order_id, validate_delivery
from florist.order.status import OrderStatus
from florist.payments.gateway import get_gateway

logger = structlog.get_logger(__name__)


@florist.command(part_of="Order")
class PlaceOrder:
    owner_id: Identifier(required=True)
    delivery_method: String(required=True, max_length=20)
    payment_method: String(required=True, max_length=50)
    address: Text()
    shipping_fee: Integer(min_value=0)
    payment_type: String(max_length=50)  # direct charge, e.g. "bank_transfer"
    bank: String(max_length=20)
    customer_name: String(max_length=255)
    customer_email: String(max_length=255)
    customer_phone: String(max_length=50)


def initial_status_for(payment_method: str, cash_methods) -> str:
    if payment_method.strip().lower() in {m.lower() for m in cash_methods}:
        return OrderStatus.PENDING.value
    return OrderStatus.WAITING_PAYMENT.value


def _customer_details(command):
    """Customer details from the command, completed from the owner's account."""
    from florist.accounts.management import find_account

    name, email, phone = command.customer_name, command.customer_email, command.customer_phone
    if not (name and email and phone):
        account = find_account(command.owner_id)
        if account is not None:
            name = name or account.name
            email = email or account.email
            phone = phone or account.phone
    return name, email, phone


def _gateway_items(snapshot, shipping_fee):
    items = []
    for line in snapshot.lines:
        if line.total_price % line.quantity:
            return None  # item prices must add up to the gross amount
        items.append(
            {
                "id": line.bouquet_id,
                "price": line.total_price // line.quantity,
                "quantity": line.quantity,
                "name": (line.name or "Bouquet")[:50],
            }
        )
    if shipping_fee:
        items.append({"id": "SHIPPING", "price": shipping_fee, "quantity": 1, "name": "Shipping fee"})
    return items


@florist.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        settings = get_settings()
        validate_delivery(command.delivery_method, command.address, command.shipping_fee)

        snapshot = CartSnapshot.capture(command.owner_id)
        if snapshot.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        order_id = new_order_id()
        shipping_fee = command.shipping_fee if command.delivery_method == "delivery" else 0
        status = initial_status_for(command.payment_method, settings.cash_payment_methods)
        name, email, phone = _customer_details(command)

        payment = None
        if status == OrderStatus.WAITING_PAYMENT.value:
            options = {
                "customer": {"name": name, "email": email, "phone": phone},
                "address": command.address,
                "bank": command.bank,
            }
            items = _gateway_items(snapshot, shipping_fee)
            if items:
                options["items"] = items

            payment = get_gateway().create_transaction(
                order_id,
                snapshot.subtotal + shipping_fee,
                command.payment_type,
                options,
            )
            if not payment.success:
                logger.warning(
                    "payment_transaction_failed",
                    order_id=order_id,
                    owner_id=command.owner_id,
                    reason=payment.failure_reason,
                )
                raise UpstreamFailure(payment.failure_reason or "Payment gateway failed", provider="payment")

        order = Order.place(
            order_id=order_id,
            owner_id=command.owner_id,
            snapshot=snapshot,
            delivery_method=command.delivery_method,
            payment_method=command.payment_method.strip().lower(),
            initial_status=status,
            address=command.address,
            shipping_fee=shipping_fee,
            customer_name=name,
            customer_email=email,
            customer_phone=phone,
            payment_type=command.payment_type,
            payment=payment,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_placed",
            order_id=order_id,
            owner_id=command.owner_id,
            total_price=order.total_price,
            status=status,
            items=len(snapshot.lines),
        )
        return str(order.id)
