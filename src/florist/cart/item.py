"""CartItem aggregate: one bouquet line in a customer's cart.

Each cart item is stored on its own and linked to its owner by
``owner_id``. ``total_price`` is the line total computed when the item was
added or last updated; it is a cache, and ``recompute_total`` prices the
same line again at current material prices without touching it.
"""

import json
from datetime import datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from florist.domain import florist
from florist.pricing.engine import LineItemQuote, MaterialEntry, PricingEngine, parse_entries


@florist.aggregate
class CartItem:
    owner_id: Identifier(required=True)
    bouquet_id: Identifier(required=True)
    name: String(max_length=255)
    image_url: String(max_length=500)
    size: String(required=True, max_length=30)
    quantity: Integer(required=True, min_value=1, default=1)
    custom_materials: Text()  # JSON: [{material_id, quantity}]
    service_price: Integer(min_value=0, default=0)
    total_price: Integer(min_value=0, default=0)
    request_date: String(max_length=50)
    order_note: Text()
    photo_urls: Text()  # JSON: [url]
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def custom_quantities_cannot_be_negative(self):
        if any(entry.quantity < 0 for entry in self.custom_entries()):
            raise ValidationError({"custom_materials": ["Quantities cannot be negative"]})

    def custom_entries(self) -> list[MaterialEntry]:
        return parse_entries(self.custom_materials)

    def photos(self) -> list[str]:
        return json.loads(self.photo_urls) if self.photo_urls else []

    def frozen_total(self) -> int:
        """The total stored when the item was last written."""
        return self.total_price

    def quote(self, engine: PricingEngine, bouquet) -> LineItemQuote:
        return engine.quote_line_item(
            bouquet.materials_by_size,
            self.size,
            self.quantity,
            self.custom_materials,
            self.service_price,
        )

    def recompute_total(self, engine: PricingEngine, bouquet) -> int:
        """Price this line again at current material prices. The stored total is left as is."""
        return self.quote(engine, bouquet).total

    @classmethod
    def add(
        cls,
        owner_id,
        bouquet,
        size,
        quantity,
        total_price,
        custom_materials=None,
        request_date=None,
        order_note=None,
        photo_urls=None,
        name=None,
        image_url=None,
    ):
        from florist.cart.events import ItemAddedToCart

        now = datetime.now()
        item = cls(
            owner_id=owner_id,
            bouquet_id=bouquet.id,
            name=name or bouquet.name,
            image_url=image_url or bouquet.image_url,
            size=size,
            quantity=quantity,
            custom_materials=json.dumps(custom_materials or []),
            service_price=bouquet.service_fee or 0,
            total_price=total_price,
            request_date=request_date,
            order_note=order_note or "",
            photo_urls=json.dumps(photo_urls or []),
            created_at=now,
            updated_at=now,
        )
        item.raise_(
            ItemAddedToCart(
                cart_item_id=item.id,
                owner_id=owner_id,
                bouquet_id=item.bouquet_id,
                size=size,
                quantity=quantity,
                total_price=total_price,
            )
        )
        return item

    def update(
        self,
        size=None,
        quantity=None,
        custom_materials=None,
        request_date=None,
        order_note=None,
        photo_urls=None,
    ):
        """Apply the given changes. ``service_price`` never changes after the item is added."""
        if size is not None:
            self.size = size
        if quantity is not None:
            self.quantity = quantity
        if custom_materials is not None:
            self.custom_materials = json.dumps(custom_materials)
        if request_date is not None:
            self.request_date = request_date
        if order_note is not None:
            self.order_note = order_note
        if photo_urls is not None:
            self.photo_urls = json.dumps(photo_urls)
        self.updated_at = datetime.now()

    def reprice(self, total_price):
        from florist.cart.events import CartItemUpdated

        self.total_price = total_price
        self.raise_(
            CartItemUpdated(
                cart_item_id=self.id,
                owner_id=self.owner_id,
                size=self.size,
                quantity=self.quantity,
                total_price=total_price,
            )
        )
