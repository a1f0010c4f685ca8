"""Order events to push notifications.

Fan-out is a side effect of the order change that triggered it: any
failure here is logged and never undoes or fails that change.
"""

import structlog
from protean import handle

from florist.domain import florist
from florist.notifications.router import get_router
from florist.order.events import OrderPlaced, OrderStatusChanged
from florist.order.order import Order

logger = structlog.get_logger(__name__)


@florist.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        try:
            get_router().notify_new_order(event)
        except Exception as exc:
            logger.error("new_order_notification_failed", order_id=str(event.order_id), error=str(exc))

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        try:
            get_router().notify_status_update(event)
        except Exception as exc:
            logger.error(
                "status_notification_failed",
                order_id=str(event.order_id),
                status=event.status,
                error=str(exc),
            )
