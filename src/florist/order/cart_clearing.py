"""Removing ordered items from the customer's cart.

Runs after the order is stored. Safe to repeat: items already gone are
skipped, and an order whose cart was cleared is left alone.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from florist.cart.item import CartItem
from florist.domain import florist
from florist.errors import PersistenceFailure
from florist.order.fulfillment import load_order
from florist.order.order import Order

logger = structlog.get_logger(__name__)


@florist.command(part_of="Order")
class ClearOrderCart:
    order_id: Identifier(required=True)


def delete_cart_items(cart_item_ids) -> int:
    """Delete the given cart items, ignoring ids that no longer exist."""
    repo = current_domain.repository_for(CartItem)
    deleted = 0
    for cart_item_id in cart_item_ids:
        try:
            item = repo.get(cart_item_id)
        except ObjectNotFoundError:
            continue
        try:
            repo._dao.delete(item)
        except Exception as exc:
            raise PersistenceFailure(f"Could not delete cart item {cart_item_id}: {exc}") from exc
        deleted += 1
    return deleted


@florist.command_handler(part_of=Order)
class ClearOrderCartHandler:
    @handle(ClearOrderCart)
    def clear_cart(self, command):
        order = load_order(command.order_id)
        if order.cart_cleared:
            return True

        deleted = delete_cart_items(order.pending_cart_item_ids())
        order.mark_cart_cleared()
        current_domain.repository_for(Order).add(order)

        logger.info("order_cart_cleared", order_id=command.order_id, deleted=deleted)
        return True
