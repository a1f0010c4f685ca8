"""Domain events for the DeviceTokenSet aggregate."""

from protean.fields import Identifier, String, Text

from florist.domain import florist


@florist.event(part_of="DeviceTokenSet")
class DeviceTokenRegistered:
    __version__ = 1

    recipient_id = Identifier(required=True)
    token = String(required=True, max_length=4096)


@florist.event(part_of="DeviceTokenSet")
class DeviceTokensRemoved:
    """Tokens were unregistered by the device or pruned after a permanent delivery failure."""

    __version__ = 1

    recipient_id = Identifier(required=True)
    tokens = Text(required=True)  # JSON: [token]
    reason = String(required=True)  # "unregistered" or "pruned"
