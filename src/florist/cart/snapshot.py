"""Point-in-time copy of a customer's cart, taken when an order is placed.

Each line carries the total stored on the cart item. Later material price
changes never reach an order built from a snapshot.
"""

from dataclasses import dataclass, field

from florist.cart.item import CartItem


@dataclass(frozen=True)
class SnapshotLine:
    cart_item_id: str
    bouquet_id: str
    name: str
    size: str
    quantity: int
    service_price: int
    total_price: int
    custom_materials: tuple = ()
    image_url: str | None = None
    request_date: str | None = None
    order_note: str | None = None
    photo_urls: tuple[str, ...] = ()

    @classmethod
    def from_cart_item(cls, item: CartItem) -> "SnapshotLine":
        return cls(
            cart_item_id=str(item.id),
            bouquet_id=str(item.bouquet_id),
            name=item.name or "",
            size=item.size,
            quantity=item.quantity,
            service_price=item.service_price or 0,
            total_price=item.frozen_total() or 0,
            custom_materials=tuple(
                {"material_id": entry.material_id, "quantity": entry.quantity} for entry in item.custom_entries()
            ),
            image_url=item.image_url,
            request_date=item.request_date,
            order_note=item.order_note,
            photo_urls=tuple(item.photos()),
        )


@dataclass(frozen=True)
class CartSnapshot:
    owner_id: str
    lines: tuple[SnapshotLine, ...] = field(default_factory=tuple)

    @property
    def subtotal(self) -> int:
        return sum(line.total_price for line in self.lines)

    @property
    def cart_item_ids(self) -> list[str]:
        return [line.cart_item_id for line in self.lines]

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @classmethod
    def capture(cls, owner_id) -> "CartSnapshot":
        from florist.cart.management import items_for_owner

        return cls(
            owner_id=str(owner_id),
            lines=tuple(SnapshotLine.from_cart_item(item) for item in items_for_owner(owner_id)),
        )
