"""Template registry: maps a notification type to its template class.

Each template renders a ``PushMessage`` from event context data.
"""

from florist.notifications.templates.new_order import ADMIN_ORDER_NEW, NewOrderTemplate
from florist.notifications.templates.order_status_update import ORDER_STATUS_UPDATE, OrderStatusUpdateTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    ORDER_STATUS_UPDATE: OrderStatusUpdateTemplate,
    ADMIN_ORDER_NEW: NewOrderTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
