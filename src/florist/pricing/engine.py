"""Bouquet pricing from a bill of materials.

Two paths share the same arithmetic but differ on missing materials:

- ``compute_base_price_by_size`` runs when a bouquet is created or its
  composition changes. Every material must exist; one missing material
  aborts the whole computation with ``MaterialNotFound``.
- ``quote_line_item`` / ``compute_line_item_total`` run when a cart item is
  added, updated or displayed. Missing materials are skipped.

All amounts are integers in the smallest currency unit. Nothing is cached:
every call reads current prices from the catalog.
"""

import json
from dataclasses import dataclass, field

import structlog

from florist.errors import MaterialNotFound
from florist.pricing.catalog import MaterialCatalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MaterialEntry:
    material_id: str
    quantity: int = 0


@dataclass(frozen=True)
class MaterialLine:
    material_id: str
    name: str
    unit_price: int
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class LineItemQuote:
    size: str
    quantity: int
    service_price: int
    standard: tuple[MaterialLine, ...] = field(default_factory=tuple)
    custom: tuple[MaterialLine, ...] = field(default_factory=tuple)

    @property
    def materials_total(self) -> int:
        return sum(line.subtotal for line in self.standard) + sum(line.subtotal for line in self.custom)

    @property
    def unit_price(self) -> int:
        return self.materials_total + self.service_price

    @property
    def total(self) -> int:
        return self.unit_price * self.quantity


def normalize_size(size) -> str:
    return str(size or "").strip().lower()


def parse_entries(entries, strict: bool = False) -> list[MaterialEntry]:
    """Normalize a list of ``{material_id, quantity}`` mappings.

    Accepts a JSON string or a list. ``materialId`` is accepted as an alias of
    ``material_id``; a missing quantity counts as zero. Entries without a
    material id are dropped, or raise ``MaterialNotFound`` when ``strict``.
    """
    if not entries:
        return []
    if isinstance(entries, str):
        entries = json.loads(entries)

    parsed = []
    for entry in entries:
        if isinstance(entry, MaterialEntry):
            parsed.append(entry)
            continue
        material_id = str(entry.get("material_id") or entry.get("materialId") or "").strip()
        if not material_id:
            if strict:
                raise MaterialNotFound("Material reference without a material_id")
            continue
        parsed.append(MaterialEntry(material_id=material_id, quantity=int(entry.get("quantity") or 0)))
    return parsed


def parse_bill_of_materials(materials_by_size, strict: bool = False) -> dict[str, list[MaterialEntry]]:
    """Normalize ``size -> [entries]``, from a JSON string or a mapping.

    Size names are lower-cased and stripped.
    """
    if not materials_by_size:
        return {}
    if isinstance(materials_by_size, str):
        materials_by_size = json.loads(materials_by_size)
    return {normalize_size(size): parse_entries(entries, strict) for size, entries in materials_by_size.items()}


class PricingEngine:
    def __init__(self, catalog: MaterialCatalog):
        self.catalog = catalog

    def compute_base_price_by_size(self, materials_by_size, service_fee: int | None) -> dict[str, int]:
        """Price every size of a bouquet: ``service_fee + sum(price * quantity)``.

        Raises ``MaterialNotFound`` if any referenced material is missing or an
        entry carries no material id.
        No partial result is returned.
        """
        fee = service_fee or 0
        prices = {}
        for size, entries in parse_bill_of_materials(materials_by_size, strict=True).items():
            total = 0
            for entry in entries:
                material = self.catalog.get(entry.material_id)
                if material is None:
                    logger.warning(
                        "base_price_material_missing",
                        material_id=entry.material_id,
                        size=size,
                    )
                    raise MaterialNotFound(f"Material {entry.material_id} not found")
                total += material.price * entry.quantity
            prices[size] = total + fee
        return prices

    def _price_lines(self, entries: list[MaterialEntry]) -> tuple[MaterialLine, ...]:
        lines = []
        for entry in entries:
            material = self.catalog.get(entry.material_id)
            if material is None:
                logger.info("line_item_material_skipped", material_id=entry.material_id)
                continue
            lines.append(
                MaterialLine(
                    material_id=entry.material_id,
                    name=material.name,
                    unit_price=material.price,
                    quantity=entry.quantity,
                )
            )
        return tuple(lines)

    def quote_line_item(
        self,
        materials_by_size,
        size: str,
        quantity: int,
        custom_materials=None,
        service_price: int | None = 0,
    ) -> LineItemQuote:
        """Price one cart line with a per-material breakdown.

        Standard materials come from the bouquet's bill of materials for
        ``size``; custom materials are priced on top. Missing materials are
        left out of the breakdown.
        """
        bill_of_materials = parse_bill_of_materials(materials_by_size)
        return LineItemQuote(
            size=size,
            quantity=quantity,
            service_price=service_price or 0,
            standard=self._price_lines(bill_of_materials.get(normalize_size(size), [])),
            custom=self._price_lines(parse_entries(custom_materials)),
        )

    def compute_line_item_total(
        self,
        materials_by_size,
        size: str,
        quantity: int,
        custom_materials=None,
        service_price: int | None = 0,
    ) -> int:
        """``(standard + custom + service_price) * quantity`` at current prices."""
        return self.quote_line_item(materials_by_size, size, quantity, custom_materials, service_price).total

    def price_for_size(self, materials_by_size, size: str, service_fee: int | None) -> int:
        """Current price of one unit of ``size``, without customizations."""
        return self.quote_line_item(materials_by_size, size, 1, None, service_fee).total


def get_pricing_engine() -> PricingEngine:
    """Engine wired to the repository-backed material catalog."""
    from florist.pricing.catalog import RepositoryMaterialCatalog

    return PricingEngine(RepositoryMaterialCatalog())
