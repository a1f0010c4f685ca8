"""Bouquet details and removal: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from florist.catalogue.bouquet import Bouquet
from florist.catalogue.composition import load_bouquet
from florist.domain import florist


@florist.command(part_of="Bouquet")
class UpdateBouquetDetails:
    bouquet_id: Identifier(required=True)
    name: String(max_length=255)
    description: Text()
    category: String(max_length=50)
    bouquet_type: String(max_length=20)
    requires_photo: Boolean()
    is_customizable: Boolean()
    processing_time_days: Integer(min_value=0)
    image_url: String(max_length=500)


@florist.command(part_of="Bouquet")
class RemoveBouquet:
    bouquet_id: Identifier(required=True)


@florist.command_handler(part_of=Bouquet)
class ManageBouquetDetailsHandler:
    @handle(UpdateBouquetDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Bouquet)
        bouquet = load_bouquet(command.bouquet_id)
        bouquet.update_details(
            name=command.name,
            description=command.description,
            category=command.category,
            bouquet_type=command.bouquet_type,
            requires_photo=command.requires_photo,
            is_customizable=command.is_customizable,
            processing_time_days=command.processing_time_days,
            image_url=command.image_url,
        )
        repo.add(bouquet)

    @handle(RemoveBouquet)
    def remove(self, command):
        repo = current_domain.repository_for(Bouquet)
        bouquet = load_bouquet(command.bouquet_id)
        repo._dao.delete(bouquet)
