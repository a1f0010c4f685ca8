"""Order status update: sent to the customer whenever an order's status changes."""

import json

from florist.config import Settings
from florist.notifications.channel.push_port import PushMessage
from florist.notifications.templates.items import summarize_items

ORDER_STATUS_UPDATE = "order_status_update"

STATUS_TEXT = {
    "pending": "Order awaiting confirmation",
    "processing": "Order is being prepared",
    "shipping": "Order is on its way",
    "delivered": "Order delivered",
    "done": "Order complete",
    "completed": "Order complete",
    "canceled": "Order canceled",
}


def status_text(status: str) -> str:
    """Human-readable text for a status; unmapped statuses are shown as-is."""
    return STATUS_TEXT.get(status, status)


class OrderStatusUpdateTemplate:
    notification_type = ORDER_STATUS_UPDATE

    @staticmethod
    def render(context: dict, settings: Settings) -> PushMessage:
        order_id = str(context["order_id"])
        status = str(context.get("status") or "")
        text = status_text(status)
        customer_name = context.get("customer_name") or ""
        items = summarize_items(
            context.get("item_names"),
            settings.notification_max_items,
            settings.notification_max_name_length,
        )

        title = "Order status updated"
        body = f"{customer_name or 'Your order'} • {text}"
        return PushMessage(
            title=title,
            body=body,
            data={
                "type": ORDER_STATUS_UPDATE,
                "orderId": order_id,
                "status": status,
                "status_text": text,
                "customer_name": customer_name,
                "items_json": json.dumps(items.names, ensure_ascii=False),
                "items_more": str(items.more),
                "items_summary": items.as_text(),
                "_title": title,
                "_body": body,
            },
            collapse_key=order_id,
            ttl_seconds=settings.status_update_ttl_seconds,
            channel_id=settings.android_channel_id,
        )
