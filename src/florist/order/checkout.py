"""Checkout: place an order, then clear the ordered items from the cart.

The two steps are not atomic. When the second step fails the order still
stands and ``CheckoutResult.cart_cleared`` is False; the caller can retry
with ``ClearOrderCart`` (``POST /orders/{order_id}/clear-cart``).
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from florist.order.cart_clearing import ClearOrderCart
from florist.order.fulfillment import load_order
from florist.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    status: str
    total_price: int
    cart_cleared: bool
    payment_token: str | None = None
    payment_redirect_url: str | None = None


def clear_order_cart(order_id: str) -> bool:
    """Run the cart-clearing step; report failure instead of raising."""
    try:
        current_domain.process(ClearOrderCart(order_id=order_id), asynchronous=False)
    except Exception as exc:
        logger.error("order_cart_clear_failed", order_id=order_id, error=str(exc), exc_info=True)
        return False
    return True


def checkout(command: PlaceOrder) -> CheckoutResult:
    order_id = current_domain.process(command, asynchronous=False)
    cart_cleared = clear_order_cart(order_id)

    order = load_order(order_id)
    return CheckoutResult(
        order_id=order_id,
        status=order.status,
        total_price=order.total_price,
        cart_cleared=cart_cleared,
        payment_token=order.payment_token,
        payment_redirect_url=order.payment_redirect_url,
    )
