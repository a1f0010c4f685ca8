"""Domain events for the Order aggregate.

``OrderPlaced`` and ``OrderStatusChanged`` carry the customer name and the
item names so notification rendering never has to read the order again.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from florist.domain import florist


@florist.event(part_of="Order")
class OrderPlaced:
    """A customer's cart was frozen into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    customer_name = String()
    total_price = Integer(required=True)
    status = String(required=True)
    payment_method = String(required=True)
    delivery_method = String(required=True)
    item_names = Text()  # JSON: [name]
    placed_at = DateTime(required=True)


@florist.event(part_of="Order")
class OrderStatusChanged:
    """An order's status was set by staff or by a payment notification."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    previous_status = String()
    status = String(required=True)
    source = String(required=True)  # "staff" or "payment"
    customer_name = String()
    item_names = Text()  # JSON: [name]
    changed_at = DateTime(required=True)


@florist.event(part_of="Order")
class OrderCartCleared:
    """The cart items frozen into an order were removed from the customer's cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
