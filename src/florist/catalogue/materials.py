"""Material management: add a material, change its price, update its details, remove it.

Removing a material leaves bouquets that use it untouched: their stored
prices stand, and cart pricing skips the missing material from then on.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from florist.catalogue.material import Material
from florist.domain import florist
from florist.errors import MaterialNotFound


@florist.command(part_of="Material")
class AddMaterial:
    material_id: Identifier()
    name: String(required=True, max_length=100)
    category: String(max_length=50)
    price: Integer(required=True, min_value=0)
    image_url: String(max_length=500)


@florist.command(part_of="Material")
class UpdateMaterialPrice:
    material_id: Identifier(required=True)
    price: Integer(required=True, min_value=0)


@florist.command(part_of="Material")
class UpdateMaterialDetails:
    material_id: Identifier(required=True)
    name: String(max_length=100)
    category: String(max_length=50)
    image_url: String(max_length=500)


@florist.command(part_of="Material")
class RemoveMaterial:
    material_id: Identifier(required=True)


def load_material(material_id) -> Material:
    try:
        return current_domain.repository_for(Material).get(material_id)
    except ObjectNotFoundError as exc:
        raise MaterialNotFound(f"Material {material_id} not found") from exc


@florist.command_handler(part_of=Material)
class ManageMaterialHandler:
    @handle(AddMaterial)
    def add_material(self, command):
        material = Material.add(
            name=command.name,
            price=command.price,
            category=command.category,
            image_url=command.image_url,
            material_id=command.material_id,
        )
        current_domain.repository_for(Material).add(material)
        return str(material.id)

    @handle(UpdateMaterialPrice)
    def update_price(self, command):
        material = load_material(command.material_id)
        material.change_price(command.price)
        current_domain.repository_for(Material).add(material)

    @handle(UpdateMaterialDetails)
    def update_details(self, command):
        material = load_material(command.material_id)
        material.update_details(
            name=command.name,
            category=command.category,
            image_url=command.image_url,
        )
        current_domain.repository_for(Material).add(material)

    @handle(RemoveMaterial)
    def remove(self, command):
        material = load_material(command.material_id)
        current_domain.repository_for(Material)._dao.delete(material)
