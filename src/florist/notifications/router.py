"""Notification fan-out for order events.

For each event the router works out who should hear about it, collects the
device tokens of those recipients, sends one batch through the push
gateway and removes tokens the provider reports as permanently invalid.

- ``OrderStatusChanged`` goes to the order's owner.
- ``OrderPlaced`` goes to every staff account except the owner. Staff are
  found with a role query; if the query fails, every account is scanned and
  filtered here; if nobody is found, ``fallback_staff_ids`` from settings
  is used.
"""

import json

import structlog
from protean.utils.globals import current_domain

from florist.accounts.account import Account
from florist.config import Settings, get_settings
from florist.notifications.channel import get_push_gateway
from florist.notifications.channel.push_port import BatchResult, PushGateway, PushMessage
from florist.notifications.templates import get_template
from florist.notifications.templates.new_order import ADMIN_ORDER_NEW
from florist.notifications.templates.order_status_update import ORDER_STATUS_UPDATE
from florist.notifications.tokens.management import PruneDeviceTokens, find_token_set
from florist.order.events import OrderPlaced, OrderStatusChanged

logger = structlog.get_logger(__name__)


def _role_variants(roles) -> list[str]:
    variants = []
    for role in roles:
        for variant in (role, role.lower(), role.upper(), role.capitalize()):
            if variant not in variants:
                variants.append(variant)
    return variants


class NotificationRouter:
    def __init__(self, push_gateway: PushGateway, settings: Settings):
        self.push_gateway = push_gateway
        self.settings = settings

    # Recipients -----------------------------------------------------------

    def staff_recipients(self, exclude=None) -> list[str]:
        repo = current_domain.repository_for(Account)
        try:
            accounts = repo._dao.query.filter(role__in=_role_variants(self.settings.staff_roles)).all().items
        except Exception as exc:
            logger.warning("staff_query_failed", error=str(exc))
            accounts = [a for a in repo._dao.query.all().items if a.has_role(self.settings.staff_roles)]

        staff_ids = [str(account.id) for account in accounts]
        if not staff_ids:
            staff_ids = list(self.settings.fallback_staff_ids)

        return [staff_id for staff_id in staff_ids if staff_id != str(exclude)]

    def resolve_recipients(self, event) -> list[str]:
        if isinstance(event, OrderStatusChanged):
            return [str(event.owner_id)]
        if isinstance(event, OrderPlaced):
            return self.staff_recipients(exclude=event.owner_id)
        raise ValueError(f"No recipients defined for event: {type(event).__name__}")

    # Tokens ---------------------------------------------------------------

    def resolve_tokens(self, recipient_ids) -> list[str]:
        """Union of the recipients' tokens, without duplicates."""
        tokens = []
        for recipient_id in recipient_ids:
            token_set = find_token_set(recipient_id)
            if token_set is None:
                continue
            for token in token_set.token_list():
                if token not in tokens:
                    tokens.append(token)
        return tokens

    # Delivery -------------------------------------------------------------

    def send(self, tokens, message: PushMessage) -> BatchResult:
        if not tokens:
            return BatchResult(success_count=0, failure_count=0, responses=())
        return self.push_gateway.send_batch(list(tokens), message)

    def prune(self, recipient_ids, result: BatchResult) -> list[str]:
        """Remove permanently invalid tokens from every recipient's set.

        Runs as a ``PruneDeviceTokens`` command; a failure is logged and
        otherwise ignored. Transiently failed tokens are kept.
        """
        failed = result.permanently_failed_tokens
        if not failed or not recipient_ids:
            return []

        try:
            current_domain.process(
                PruneDeviceTokens(recipient_ids=json.dumps(list(recipient_ids)), tokens=json.dumps(failed))
            )
        except Exception as exc:
            logger.error("device_token_prune_failed", tokens=len(failed), error=str(exc))
        return failed

    def deliver(self, recipient_ids, message: PushMessage) -> BatchResult:
        tokens = self.resolve_tokens(recipient_ids)
        result = self.send(tokens, message)
        self.prune(recipient_ids, result)

        logger.info(
            "push_fanout_completed",
            notification_type=message.data.get("type"),
            order_id=message.data.get("orderId"),
            recipients=len(recipient_ids),
            tokens=len(tokens),
            success_count=result.success_count,
            failure_count=result.failure_count,
        )
        return result

    def notify_status_update(self, event: OrderStatusChanged) -> BatchResult:
        message = get_template(ORDER_STATUS_UPDATE).render(
            {
                "order_id": event.order_id,
                "status": event.status,
                "customer_name": event.customer_name,
                "item_names": event.item_names,
            },
            self.settings,
        )
        return self.deliver(self.resolve_recipients(event), message)

    def notify_new_order(self, event: OrderPlaced) -> BatchResult:
        recipients = self.resolve_recipients(event)
        if not recipients:
            logger.info("new_order_no_staff", order_id=str(event.order_id))
            return BatchResult()

        message = get_template(ADMIN_ORDER_NEW).render(
            {
                "order_id": event.order_id,
                "owner_id": event.owner_id,
                "customer_name": event.customer_name,
                "total_price": event.total_price,
                "item_names": event.item_names,
            },
            self.settings,
        )
        return self.deliver(recipients, message)


def get_router() -> NotificationRouter:
    return NotificationRouter(get_push_gateway(), get_settings())
