"""Bouquet composition: create a bouquet and reprice it when its materials or fee change.

Both commands price every size through the pricing engine before anything
is stored. A missing material raises ``MaterialNotFound`` and no bouquet is
created or changed.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from florist.catalogue.bouquet import Bouquet
from florist.domain import florist
from florist.errors import BouquetNotFound
from florist.pricing.engine import get_pricing_engine, normalize_size


@florist.command(part_of="Bouquet")
class CreateBouquet:
    name: String(required=True, max_length=255)
    description: Text()
    category: String(max_length=50)
    bouquet_type: String(max_length=20)
    requires_photo: Boolean(default=False)
    is_customizable: Boolean(default=False)
    processing_time_days: Integer(min_value=0, default=1)
    service_fee: Integer(min_value=0, default=0)
    image_url: String(max_length=500)
    materials_by_size: Text(required=True)  # JSON: {size: [{material_id, quantity}]}


@florist.command(part_of="Bouquet")
class UpdateBouquetComposition:
    bouquet_id: Identifier(required=True)
    materials_by_size: Text()  # JSON; unchanged when omitted
    service_fee: Integer(min_value=0)


def parse_composition(raw) -> dict:
    """Decode a ``materials_by_size`` payload, rejecting anything but a JSON object."""
    try:
        composition = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise ValidationError({"materials_by_size": [f"Invalid JSON: {exc.msg}"]}) from exc

    if not isinstance(composition, dict) or not composition:
        raise ValidationError({"materials_by_size": ["Expected a non-empty mapping of size to materials"]})

    normalized = {}
    for size, entries in composition.items():
        if not isinstance(entries, list):
            raise ValidationError({"materials_by_size": [f"Size '{size}' must map to a list of materials"]})
        key = normalize_size(size)
        if not key:
            raise ValidationError({"materials_by_size": ["Size names cannot be blank"]})
        if key in normalized:
            raise ValidationError({"materials_by_size": [f"Size '{size}' is listed more than once"]})
        normalized[key] = entries
    return normalized


def load_bouquet(bouquet_id) -> Bouquet:
    try:
        return current_domain.repository_for(Bouquet).get(bouquet_id)
    except ObjectNotFoundError as exc:
        raise BouquetNotFound(f"Bouquet {bouquet_id} not found") from exc


@florist.command_handler(part_of=Bouquet)
class BouquetCompositionHandler:
    @handle(CreateBouquet)
    def create_bouquet(self, command):
        composition = parse_composition(command.materials_by_size)
        base_price_by_size = get_pricing_engine().compute_base_price_by_size(composition, command.service_fee)

        bouquet = Bouquet.create(
            name=command.name,
            materials_by_size=composition,
            base_price_by_size=base_price_by_size,
            service_fee=command.service_fee,
            description=command.description,
            category=command.category,
            bouquet_type=command.bouquet_type,
            requires_photo=command.requires_photo,
            is_customizable=command.is_customizable,
            processing_time_days=command.processing_time_days,
            image_url=command.image_url,
        )
        current_domain.repository_for(Bouquet).add(bouquet)
        return str(bouquet.id)

    @handle(UpdateBouquetComposition)
    def update_composition(self, command):
        bouquet = load_bouquet(command.bouquet_id)

        if command.materials_by_size is not None:
            composition = parse_composition(command.materials_by_size)
        else:
            composition = json.loads(bouquet.materials_by_size)
        service_fee = command.service_fee if command.service_fee is not None else bouquet.service_fee

        base_price_by_size = get_pricing_engine().compute_base_price_by_size(composition, service_fee)
        bouquet.change_composition(composition, service_fee, base_price_by_size)
        current_domain.repository_for(Bouquet).add(bouquet)
