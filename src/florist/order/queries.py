"""Read-side views of orders."""

import json

from protean.utils.globals import current_domain

from florist.order.fulfillment import load_order
from florist.order.order import Order
from florist.order.status import canonical_status

DEFAULT_LIMIT = 25


def _iso(value):
    return value.isoformat() if value else None


def order_view(order: Order) -> dict:
    return {
        "order_id": str(order.id),
        "owner_id": str(order.owner_id),
        "customer_name": order.customer_name,
        "delivery_method": order.delivery_method,
        "address": order.address,
        "shipping_fee": order.shipping_fee,
        "payment_method": order.payment_method,
        "payment_type": order.payment_type,
        "payment_channel": order.payment_channel,
        "payment_token": order.payment_token,
        "payment_redirect_url": order.payment_redirect_url,
        "total_price": order.total_price,
        "status": order.status,
        "provider_status": order.provider_status,
        "fraud_status": order.fraud_status,
        "paid_at": _iso(order.paid_at),
        "cart_cleared": order.cart_cleared,
        "total_items": sum(item.quantity for item in order.line_items),
        "line_items": [
            {
                "cart_item_id": item.cart_item_id,
                "bouquet_id": item.bouquet_id,
                "name": item.name,
                "size": item.size,
                "quantity": item.quantity,
                "service_price": item.service_price,
                "total_price": item.total_price,
                "custom_materials": json.loads(item.custom_materials) if item.custom_materials else [],
                "image_url": item.image_url,
                "request_date": item.request_date,
                "order_note": item.order_note,
                "photo_urls": json.loads(item.photo_urls) if item.photo_urls else [],
            }
            for item in order.line_items
        ],
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def get_order(order_id) -> dict:
    return order_view(load_order(order_id))


def list_orders(owner_id=None, status=None, limit: int | None = DEFAULT_LIMIT) -> list[dict]:
    """Orders newest first, optionally filtered by owner and status.

    ``status`` accepts the same aliases as staff updates (``dikirim``) and
    raw provider statuses such as ``capture``.
    """
    filters = {}
    if owner_id:
        filters["owner_id"] = owner_id
    if status:
        filters["status"] = canonical_status(status)

    query = current_domain.repository_for(Order)._dao.query
    orders = query.filter(**filters).all().items if filters else query.all().items
    orders = sorted(orders, key=lambda o: o.created_at, reverse=True)
    if limit is not None:
        orders = orders[:limit]
    return [order_view(o) for o in orders]


def orders_for_owner(owner_id, limit: int | None = None) -> list[dict]:
    return list_orders(owner_id=owner_id, limit=limit)
