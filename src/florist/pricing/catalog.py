"""Material catalog: the price lookup the pricing engine reads from.

The engine only needs ``get(material_id) -> MaterialPrice | None``. The
production adapter reads the ``Material`` aggregate through its repository;
tests can hand the engine an in-memory catalog instead.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from florist.errors import UpstreamFailure

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MaterialPrice:
    material_id: str
    name: str
    price: int


class MaterialCatalog(ABC):
    @abstractmethod
    def get(self, material_id: str) -> MaterialPrice | None:
        """Return the current price of a material, or None if it does not exist."""


class InMemoryMaterialCatalog(MaterialCatalog):
    """Dictionary-backed catalog, handy for pricing previews and tests."""

    def __init__(self, materials: dict[str, MaterialPrice] | None = None):
        self._materials = dict(materials or {})

    def put(self, material_id: str, name: str, price: int) -> None:
        self._materials[material_id] = MaterialPrice(material_id=material_id, name=name, price=price)

    def get(self, material_id: str) -> MaterialPrice | None:
        return self._materials.get(material_id)


class RepositoryMaterialCatalog(MaterialCatalog):
    """Reads material prices from the ``Material`` repository."""

    def get(self, material_id: str) -> MaterialPrice | None:
        from florist.catalogue.material import Material

        try:
            material = current_domain.repository_for(Material).get(material_id)
        except ObjectNotFoundError:
            return None
        except Exception as exc:
            logger.error("material_lookup_failed", material_id=material_id, error=str(exc))
            raise UpstreamFailure(f"Material catalog unavailable: {exc}", provider="catalog") from exc

        return MaterialPrice(material_id=str(material.id), name=material.name, price=material.price)
