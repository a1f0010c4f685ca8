"""Domain events for the Account aggregate."""

from protean.fields import Identifier, String

from florist.domain import florist


@florist.event(part_of="Account")
class AccountRegistered:
    __version__ = 1

    account_id = Identifier(required=True)
    name = String(required=True)
    role = String()


@florist.event(part_of="Account")
class AccountRoleChanged:
    __version__ = 1

    account_id = Identifier(required=True)
    previous_role = String()
    role = String(required=True)
