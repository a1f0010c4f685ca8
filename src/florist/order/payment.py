"""Payment notifications: apply gateway webhooks to orders.

The gateway may deliver a notification more than once and in any order.
Applying the same notification again leaves the order untouched and sends
no second customer notification. Signatures are checked by the HTTP
adapter before the command is issued.
"""

from datetime import datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from florist.domain import florist
from florist.order.fulfillment import load_order
from florist.order.order import Order
from florist.order.status import payment_channel_for

logger = structlog.get_logger(__name__)


@florist.command(part_of="Order")
class ProcessPaymentNotification:
    """A gateway webhook callback for one order."""

    order_id: Identifier(required=True)
    transaction_status: String(required=True, max_length=50)  # settlement, pending, expire, ...
    fraud_status: String(max_length=50)
    payment_channel: String(max_length=100)
    settlement_time: String(max_length=50)


def notification_from_webhook(body) -> ProcessPaymentNotification:
    """Build the command from a webhook body as the gateway posted it."""
    if not isinstance(body, dict):
        raise ValidationError({"body": ["Expected a JSON object"]})

    missing = [key for key in ("order_id", "transaction_status") if not body.get(key)]
    if missing:
        raise ValidationError({key: ["This field is required"] for key in missing})

    return ProcessPaymentNotification(
        order_id=str(body["order_id"]),
        transaction_status=str(body["transaction_status"]),
        fraud_status=body.get("fraud_status"),
        payment_channel=payment_channel_for(body),
        settlement_time=body.get("settlement_time"),
    )


def _parse_settlement_time(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


@florist.command_handler(part_of=Order)
class PaymentNotificationHandler:
    @handle(ProcessPaymentNotification)
    def process_notification(self, command):
        order = load_order(command.order_id)
        changed = order.apply_payment_notification(
            transaction_status=command.transaction_status,
            fraud_status=command.fraud_status,
            payment_channel=command.payment_channel,
            settled_at=_parse_settlement_time(command.settlement_time),
        )

        if not changed:
            logger.info(
                "payment_notification_replayed",
                order_id=command.order_id,
                transaction_status=command.transaction_status,
            )
            return False

        current_domain.repository_for(Order).add(order)
        logger.info(
            "payment_notification_applied",
            order_id=command.order_id,
            transaction_status=command.transaction_status,
            status=order.status,
        )
        return True
