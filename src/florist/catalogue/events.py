"""Domain events for the Material and Bouquet aggregates."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from florist.domain import florist


@florist.event(part_of="Material")
class MaterialAdded:
    """A new material was added to the catalog."""

    __version__ = 1

    material_id = Identifier(required=True)
    name = String(required=True)
    category = String()
    price = Integer(required=True)
    created_at = DateTime(required=True)


@florist.event(part_of="Material")
class MaterialPriceChanged:
    """A material's unit price changed. Existing carts and orders keep their totals."""

    __version__ = 1

    material_id = Identifier(required=True)
    previous_price = Integer(required=True)
    new_price = Integer(required=True)


@florist.event(part_of="Bouquet")
class BouquetCreated:
    """A bouquet was created and every size was priced."""

    __version__ = 1

    bouquet_id = Identifier(required=True)
    name = String(required=True)
    bouquet_type = String()
    service_fee = Integer()
    base_price_by_size = Text(required=True)  # JSON: {size: int}
    created_at = DateTime(required=True)


@florist.event(part_of="Bouquet")
class BouquetRepriced:
    """A bouquet's bill of materials or service fee changed and its sizes were repriced."""

    __version__ = 1

    bouquet_id = Identifier(required=True)
    materials_by_size = Text(required=True)  # JSON: {size: [{material_id, quantity}]}
    service_fee = Integer()
    base_price_by_size = Text(required=True)  # JSON: {size: int}


@florist.event(part_of="Bouquet")
class BouquetDetailsUpdated:
    """Descriptive fields of a bouquet changed. Prices are unaffected."""

    __version__ = 1

    bouquet_id = Identifier(required=True)
    name = String()
    category = String()
    bouquet_type = String()

