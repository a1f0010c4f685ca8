"""Cart management: add, update and remove cart items.

Totals are computed on the server when an item is added or updated, from
the bouquet's bill of materials for the chosen size, the custom materials
and the service price copied from the bouquet when the item was added.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from florist.cart.item import CartItem
from florist.cart.photos import extract_photo_urls, merge_photo_urls
from florist.catalogue.composition import load_bouquet
from florist.domain import florist
from florist.errors import CartItemNotFound
from florist.pricing.engine import get_pricing_engine, normalize_size


@florist.command(part_of="CartItem")
class AddToCart:
    owner_id: Identifier(required=True)
    bouquet_id: Identifier(required=True)
    size: String(required=True, max_length=30)
    quantity: Integer(min_value=1, default=1)
    custom_materials: Text()  # JSON: [{material_id, quantity}]
    request_date: String(max_length=50)
    order_note: Text()
    photo_urls: Text()  # JSON: [url]
    name: String(max_length=255)
    image_url: String(max_length=500)


@florist.command(part_of="CartItem")
class UpdateCartItem:
    cart_item_id: Identifier(required=True)
    size: String(max_length=30)
    quantity: Integer(min_value=1)
    custom_materials: Text()  # JSON; unchanged when omitted
    request_date: String(max_length=50)
    order_note: Text()
    photo_urls: Text()  # JSON; replaces the stored list when given


@florist.command(part_of="CartItem")
class RemoveFromCart:
    cart_item_id: Identifier(required=True)


def _json_list(raw, field_name):
    if raw is None:
        return None
    try:
        value = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise ValidationError({field_name: [f"Invalid JSON: {exc.msg}"]}) from exc
    if not isinstance(value, list):
        raise ValidationError({field_name: ["Expected a list"]})
    return value


def _require_size(bouquet, size):
    if not bouquet.offers_size(size):
        raise ValidationError({"size": [f"Bouquet {bouquet.id} is not offered in size '{size}'"]})


def load_cart_item(cart_item_id) -> CartItem:
    try:
        return current_domain.repository_for(CartItem).get(cart_item_id)
    except ObjectNotFoundError as exc:
        raise CartItemNotFound(f"Cart item {cart_item_id} not found") from exc


@florist.command_handler(part_of=CartItem)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        bouquet = load_bouquet(command.bouquet_id)
        size = normalize_size(command.size)
        _require_size(bouquet, size)
        custom_materials = _json_list(command.custom_materials, "custom_materials") or []

        note, pasted_urls = extract_photo_urls(command.order_note)
        photo_urls = merge_photo_urls(_json_list(command.photo_urls, "photo_urls"), pasted_urls)

        total_price = get_pricing_engine().compute_line_item_total(
            bouquet.materials_by_size,
            size,
            command.quantity,
            custom_materials,
            bouquet.service_fee,
        )

        item = CartItem.add(
            owner_id=command.owner_id,
            bouquet=bouquet,
            size=size,
            quantity=command.quantity,
            total_price=total_price,
            custom_materials=custom_materials,
            request_date=command.request_date,
            order_note=note,
            photo_urls=photo_urls,
            name=command.name,
            image_url=command.image_url,
        )
        current_domain.repository_for(CartItem).add(item)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(CartItem)
        item = load_cart_item(command.cart_item_id)
        bouquet = load_bouquet(item.bouquet_id)
        if command.size is not None:
            _require_size(bouquet, command.size)

        note = command.order_note
        photo_urls = _json_list(command.photo_urls, "photo_urls")
        if note is not None:
            note, pasted_urls = extract_photo_urls(note)
            if pasted_urls:
                base = photo_urls if photo_urls is not None else item.photos()
                photo_urls = merge_photo_urls(base, pasted_urls)

        item.update(
            size=normalize_size(command.size) if command.size is not None else None,
            quantity=command.quantity,
            custom_materials=_json_list(command.custom_materials, "custom_materials"),
            request_date=command.request_date,
            order_note=note,
            photo_urls=merge_photo_urls(photo_urls) if photo_urls is not None else None,
        )
        item.reprice(item.recompute_total(get_pricing_engine(), bouquet))
        repo.add(item)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        item = load_cart_item(command.cart_item_id)
        current_domain.repository_for(CartItem)._dao.delete(item)


def items_for_owner(owner_id) -> list[CartItem]:
    """Every cart item of ``owner_id``, oldest first."""
    items = current_domain.repository_for(CartItem)._dao.query.filter(owner_id=owner_id).all().items
    return sorted(items, key=lambda item: item.created_at)
