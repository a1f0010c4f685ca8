"""Account aggregate: the profile data the shop keeps about a user.

Authentication lives elsewhere; accounts here only carry the name shown on
orders and the role used to find staff recipients for new-order alerts.
"""

from datetime import datetime

from protean.fields import DateTime, String

from florist.domain import florist

DEFAULT_ROLE = "customer"


@florist.aggregate
class Account:
    name: String(required=True, max_length=255)
    email: String(max_length=255)
    phone: String(max_length=50)
    role: String(max_length=30, default=DEFAULT_ROLE)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def register(cls, name, email=None, phone=None, role=None, account_id=None):
        from florist.accounts.events import AccountRegistered

        now = datetime.now()
        attrs = {
            "name": name,
            "email": email,
            "phone": phone,
            "role": (role or DEFAULT_ROLE).strip(),
            "created_at": now,
            "updated_at": now,
        }
        if account_id:
            attrs["id"] = account_id

        account = cls(**attrs)
        account.raise_(AccountRegistered(account_id=account.id, name=name, role=account.role))
        return account

    def change_role(self, role):
        from florist.accounts.events import AccountRoleChanged

        previous_role = self.role
        self.role = role.strip()
        self.updated_at = datetime.now()
        self.raise_(AccountRoleChanged(account_id=self.id, previous_role=previous_role, role=self.role))

    def has_role(self, roles) -> bool:
        return (self.role or "").strip().lower() in {r.lower() for r in roles}
