"""Staff status updates: command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from florist.domain import florist
from florist.errors import OrderNotFound
from florist.order.order import Order
from florist.order.status import normalize_status


@florist.command(part_of="Order")
class UpdateOrderStatus:
    order_id: Identifier(required=True)
    status: String(required=True, max_length=50)


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise OrderNotFound(f"Order {order_id} not found") from exc


@florist.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        new_status = normalize_status(command.status)
        order = load_order(command.order_id)
        order.change_status(new_status)
        current_domain.repository_for(Order).add(order)
        return new_status
