"""Bouquet aggregate: a product template priced from a per-size bill of materials.

``materials_by_size`` maps a size name to an ordered list of
``{material_id, quantity}`` entries. ``base_price_by_size`` holds, for each of
those sizes, the service fee plus the materials total at the time the
composition was last priced.
"""

import json
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from florist.domain import florist
from florist.pricing.engine import normalize_size, parse_bill_of_materials

DEFAULT_SIZE = "small"


class BouquetType(Enum):
    TEMPLATE = "template"
    CUSTOM = "custom"


@florist.aggregate
class Bouquet:
    name: String(required=True, max_length=255)
    description: Text()
    category: String(max_length=50)
    bouquet_type: String(choices=BouquetType, default=BouquetType.TEMPLATE.value)
    requires_photo: Boolean(default=False)
    is_customizable: Boolean(default=False)
    processing_time_days: Integer(min_value=0, default=1)
    service_fee: Integer(min_value=0, default=0)
    image_url: String(max_length=500)
    materials_by_size: Text(required=True)  # JSON: {size: [{material_id, quantity}]}
    base_price_by_size: Text(required=True)  # JSON: {size: int}, service fee included
    rating_average: Float(default=0.0)
    rating_count: Integer(min_value=0, default=0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def must_offer_at_least_one_size(self):
        if not self.bill_of_materials():
            raise ValidationError({"materials_by_size": ["At least one size is required"]})

    @invariant.post
    def quantities_cannot_be_negative(self):
        for size, entries in self.bill_of_materials().items():
            if any(entry.quantity < 0 for entry in entries):
                raise ValidationError({"materials_by_size": [f"Negative quantity in size '{size}'"]})

    @invariant.post
    def every_size_must_be_priced(self):
        if set(self.base_prices()) != set(self.bill_of_materials()):
            raise ValidationError({"base_price_by_size": ["Every size must have a base price"]})

    def bill_of_materials(self):
        return parse_bill_of_materials(self.materials_by_size)

    def base_prices(self) -> dict[str, int]:
        return json.loads(self.base_price_by_size) if self.base_price_by_size else {}

    def sizes(self) -> list[str]:
        return list(self.bill_of_materials())

    def offers_size(self, size) -> bool:
        return normalize_size(size) in self.bill_of_materials()

    @classmethod
    def create(
        cls,
        name,
        materials_by_size,
        base_price_by_size,
        service_fee=0,
        description=None,
        category=None,
        bouquet_type=None,
        requires_photo=False,
        is_customizable=False,
        processing_time_days=1,
        image_url=None,
    ):
        from florist.catalogue.events import BouquetCreated

        now = datetime.now()
        bouquet = cls(
            name=name,
            description=description,
            category=category,
            bouquet_type=bouquet_type or BouquetType.TEMPLATE.value,
            requires_photo=requires_photo,
            is_customizable=is_customizable,
            processing_time_days=processing_time_days,
            service_fee=service_fee,
            image_url=image_url,
            materials_by_size=_as_json(materials_by_size),
            base_price_by_size=_as_json(base_price_by_size),
            created_at=now,
            updated_at=now,
        )
        bouquet.raise_(
            BouquetCreated(
                bouquet_id=bouquet.id,
                name=name,
                bouquet_type=bouquet.bouquet_type,
                service_fee=bouquet.service_fee,
                base_price_by_size=bouquet.base_price_by_size,
                created_at=now,
            )
        )
        return bouquet

    def change_composition(self, materials_by_size, service_fee, base_price_by_size):
        """Replace the bill of materials and/or fee together with the prices derived from them."""
        from florist.catalogue.events import BouquetRepriced

        with atomic_change(self):
            self.materials_by_size = _as_json(materials_by_size)
            self.service_fee = service_fee
            self.base_price_by_size = _as_json(base_price_by_size)
        self.updated_at = datetime.now()

        self.raise_(
            BouquetRepriced(
                bouquet_id=self.id,
                materials_by_size=self.materials_by_size,
                service_fee=self.service_fee,
                base_price_by_size=self.base_price_by_size,
            )
        )

    def record_rating(self, average, count):
        self.rating_average = average
        self.rating_count = count

    def update_details(
        self,
        name=None,
        description=None,
        category=None,
        bouquet_type=None,
        requires_photo=None,
        is_customizable=None,
        processing_time_days=None,
        image_url=None,
    ):
        from florist.catalogue.events import BouquetDetailsUpdated

        changes = {
            "name": name,
            "description": description,
            "category": category,
            "bouquet_type": bouquet_type,
            "requires_photo": requires_photo,
            "is_customizable": is_customizable,
            "processing_time_days": processing_time_days,
            "image_url": image_url,
        }
        for attr, value in changes.items():
            if value is not None:
                setattr(self, attr, value)
        self.updated_at = datetime.now()

        self.raise_(
            BouquetDetailsUpdated(
                bouquet_id=self.id,
                name=self.name,
                category=self.category,
                bouquet_type=self.bouquet_type,
            )
        )


def _as_json(value):
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)
