"""Material aggregate: a priced ingredient of a bouquet (stem, wrap, ribbon)."""

from datetime import datetime

from protean.fields import DateTime, Integer, String

from florist.domain import florist


@florist.aggregate
class Material:
    """A material and its current unit price.

    Price edits only affect prices computed afterwards. Cart items and orders
    keep the totals computed when they were created.
    """

    name: String(required=True, max_length=100)
    category: String(max_length=50)
    price: Integer(required=True, min_value=0)
    image_url: String(max_length=500)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def add(cls, name, price, category=None, image_url=None, material_id=None):
        from florist.catalogue.events import MaterialAdded

        now = datetime.now()
        attrs = {
            "name": name,
            "price": price,
            "category": category,
            "image_url": image_url,
            "created_at": now,
            "updated_at": now,
        }
        if material_id:
            attrs["id"] = material_id

        material = cls(**attrs)
        material.raise_(
            MaterialAdded(
                material_id=material.id,
                name=name,
                category=category,
                price=price,
                created_at=now,
            )
        )
        return material

    def change_price(self, new_price):
        from florist.catalogue.events import MaterialPriceChanged

        previous_price = self.price
        self.price = new_price
        self.updated_at = datetime.now()

        self.raise_(
            MaterialPriceChanged(
                material_id=self.id,
                previous_price=previous_price,
                new_price=new_price,
            )
        )

    def update_details(self, name=None, category=None, image_url=None):
        if name is not None:
            self.name = name
        if category is not None:
            self.category = category
        if image_url is not None:
            self.image_url = image_url
        self.updated_at = datetime.now()
