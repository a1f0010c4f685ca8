"""DeviceTokenSet aggregate: the push tokens registered for one recipient.

The set only grows by union and shrinks by difference, so concurrent
registrations and removals from different places converge.
"""

import json
from datetime import datetime

from protean.fields import DateTime, Identifier, Text

from florist.domain import florist


@florist.aggregate
class DeviceTokenSet:
    recipient_id: Identifier(identifier=True, required=True)
    tokens: Text(default="[]")  # JSON: sorted list of tokens
    updated_at: DateTime(default=datetime.now)

    def token_list(self) -> list[str]:
        return json.loads(self.tokens) if self.tokens else []

    def _store(self, tokens):
        self.tokens = json.dumps(sorted(tokens))
        self.updated_at = datetime.now()

    def add(self, *tokens) -> list[str]:
        """Add tokens; returns the ones that were not present yet."""
        from florist.notifications.tokens.events import DeviceTokenRegistered

        current = set(self.token_list())
        added = sorted({t for t in tokens if t} - current)
        if added:
            self._store(current | set(added))
            for token in added:
                self.raise_(DeviceTokenRegistered(recipient_id=self.recipient_id, token=token))
        return added

    def remove(self, *tokens, reason="unregistered") -> list[str]:
        """Remove tokens; returns the ones that were present."""
        from florist.notifications.tokens.events import DeviceTokensRemoved

        current = set(self.token_list())
        removed = sorted(current & set(tokens))
        if removed:
            self._store(current - set(removed))
            self.raise_(
                DeviceTokensRemoved(
                    recipient_id=self.recipient_id,
                    tokens=json.dumps(removed),
                    reason=reason,
                )
            )
        return removed
