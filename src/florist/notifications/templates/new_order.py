"""New order alert: sent to staff when a customer places an order."""

import json

from florist.config import Settings
from florist.notifications.channel.push_port import PushMessage
from florist.notifications.templates.items import summarize_items

ADMIN_ORDER_NEW = "admin_order_new"


class NewOrderTemplate:
    notification_type = ADMIN_ORDER_NEW

    @staticmethod
    def render(context: dict, settings: Settings) -> PushMessage:
        order_id = str(context["order_id"])
        customer_name = context.get("customer_name") or str(context.get("owner_id") or "")
        total_price = str(context.get("total_price", ""))
        items = summarize_items(
            context.get("item_names"),
            settings.notification_max_items,
            settings.notification_max_name_length,
        )

        title = f"New order #{order_id}"
        body = f"{customer_name or 'Customer'} • Total {total_price}"
        return PushMessage(
            title=title,
            body=body,
            data={
                "type": ADMIN_ORDER_NEW,
                "orderId": order_id,
                "customer_name": customer_name,
                "total_price": total_price,
                "items_json": json.dumps(items.names, ensure_ascii=False),
                "items_more": str(items.more),
                "items_summary": items.as_text(),
                "_title": title,
                "_body": body,
            },
            collapse_key=order_id,
            channel_id=settings.android_channel_id,
        )
