"""Read-time cart view.

Listing a cart prices every line again at current material prices and
returns the per-material breakdown. Stored totals are not rewritten. Lines
whose bouquet no longer exists are left out.
"""

import structlog

from florist.cart.management import items_for_owner
from florist.catalogue.composition import load_bouquet
from florist.errors import BouquetNotFound
from florist.pricing.engine import MaterialLine, PricingEngine, get_pricing_engine

logger = structlog.get_logger(__name__)


def _lines(lines: tuple[MaterialLine, ...]) -> list[dict]:
    return [
        {
            "material_id": line.material_id,
            "name": line.name,
            "unit_price": line.unit_price,
            "quantity": line.quantity,
            "subtotal": line.subtotal,
        }
        for line in lines
    ]


def cart_view(owner_id, engine: PricingEngine | None = None) -> dict:
    engine = engine or get_pricing_engine()
    items = []
    grand_total = 0

    for item in items_for_owner(owner_id):
        try:
            bouquet = load_bouquet(item.bouquet_id)
        except BouquetNotFound:
            logger.info("cart_item_bouquet_missing", cart_item_id=str(item.id), bouquet_id=str(item.bouquet_id))
            continue

        quote = item.quote(engine, bouquet)
        grand_total += quote.total
        items.append(
            {
                "cart_item_id": str(item.id),
                "bouquet": {
                    "bouquet_id": str(bouquet.id),
                    "name": bouquet.name,
                    "image_url": bouquet.image_url,
                    "category": bouquet.category,
                    "bouquet_type": bouquet.bouquet_type,
                    "requires_photo": bouquet.requires_photo,
                    "is_customizable": bouquet.is_customizable,
                    "processing_time_days": bouquet.processing_time_days,
                },
                "name": item.name,
                "size": item.size,
                "quantity": item.quantity,
                "service_price": item.service_price,
                "request_date": item.request_date,
                "order_note": item.order_note,
                "photo_urls": item.photos(),
                "bouquet_materials": _lines(quote.standard),
                "custom_materials": _lines(quote.custom),
                "stored_total": item.frozen_total(),
                "total_price": quote.total,
            }
        )

    return {"owner_id": str(owner_id), "items": items, "total_price": grand_total}
