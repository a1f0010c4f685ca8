"""Domain events for the CartItem aggregate."""

from protean.fields import Identifier, Integer, String

from florist.domain import florist


@florist.event(part_of="CartItem")
class ItemAddedToCart:
    """A bouquet line was added to a customer's cart and priced."""

    __version__ = 1

    cart_item_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    bouquet_id = Identifier(required=True)
    size = String(required=True)
    quantity = Integer(required=True)
    total_price = Integer(required=True)


@florist.event(part_of="CartItem")
class CartItemUpdated:
    """A cart line changed and was priced again."""

    __version__ = 1

    cart_item_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    size = String(required=True)
    quantity = Integer(required=True)
    total_price = Integer(required=True)
