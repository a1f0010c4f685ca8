"""Read-side views of the catalogue."""

from protean.utils.globals import current_domain

from florist.catalogue.bouquet import DEFAULT_SIZE, Bouquet
from florist.catalogue.composition import load_bouquet
from florist.catalogue.material import Material
from florist.pricing.engine import PricingEngine, get_pricing_engine, normalize_size


def bouquet_summary(bouquet: Bouquet) -> dict:
    return {
        "bouquet_id": str(bouquet.id),
        "name": bouquet.name,
        "description": bouquet.description,
        "category": bouquet.category,
        "bouquet_type": bouquet.bouquet_type,
        "image_url": bouquet.image_url,
        "requires_photo": bouquet.requires_photo,
        "is_customizable": bouquet.is_customizable,
        "processing_time_days": bouquet.processing_time_days,
        "service_fee": bouquet.service_fee,
        "base_price_by_size": bouquet.base_prices(),
        "rating": {"average": bouquet.rating_average or 0.0, "count": bouquet.rating_count or 0},
        "created_at": bouquet.created_at.isoformat() if bouquet.created_at else None,
    }


def list_bouquets() -> list[dict]:
    bouquets = current_domain.repository_for(Bouquet)._dao.query.all().items
    return [bouquet_summary(b) for b in bouquets]


def bouquet_detail(bouquet_id, size: str | None = None, engine: PricingEngine | None = None) -> dict:
    """A bouquet priced for one size at current material prices.

    The stored ``base_price_by_size`` is returned unchanged next to the
    recomputed ``price``, so a material price change shows up here before the
    bouquet is repriced. An unknown size is priced at the service fee alone.
    """
    engine = engine or get_pricing_engine()
    bouquet = load_bouquet(bouquet_id)
    selected = normalize_size(size or DEFAULT_SIZE)
    quote = engine.quote_line_item(bouquet.materials_by_size, selected, 1, None, bouquet.service_fee)

    detail = bouquet_summary(bouquet)
    detail.update(
        {
            "size": selected,
            "sizes": bouquet.sizes(),
            "price": quote.total,
            "base_price": quote.materials_total,
            "materials": [
                {
                    "material_id": line.material_id,
                    "name": line.name,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "subtotal": line.subtotal,
                }
                for line in quote.standard
            ],
        }
    )
    return detail


def material_view(material: Material) -> dict:
    return {
        "material_id": str(material.id),
        "name": material.name,
        "category": material.category,
        "price": material.price,
        "image_url": material.image_url,
    }


def list_materials() -> list[dict]:
    materials = current_domain.repository_for(Material)._dao.query.all().items
    return [material_view(m) for m in sorted(materials, key=lambda m: m.name)]
