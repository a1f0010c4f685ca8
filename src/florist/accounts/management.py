"""Account registration and role changes: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from florist.accounts.account import Account
from florist.domain import florist


@florist.command(part_of="Account")
class RegisterAccount:
    account_id: Identifier()
    name: String(required=True, max_length=255)
    email: String(max_length=255)
    phone: String(max_length=50)
    role: String(max_length=30)


@florist.command(part_of="Account")
class ChangeAccountRole:
    account_id: Identifier(required=True)
    role: String(required=True, max_length=30)


def find_account(account_id) -> Account | None:
    try:
        return current_domain.repository_for(Account).get(account_id)
    except ObjectNotFoundError:
        return None


@florist.command_handler(part_of=Account)
class ManageAccountHandler:
    @handle(RegisterAccount)
    def register(self, command):
        account = Account.register(
            name=command.name,
            email=command.email,
            phone=command.phone,
            role=command.role,
            account_id=command.account_id,
        )
        current_domain.repository_for(Account).add(account)
        return str(account.id)

    @handle(ChangeAccountRole)
    def change_role(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.change_role(command.role)
        repo.add(account)
