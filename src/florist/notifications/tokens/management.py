"""Device token registration, removal and pruning: commands and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from florist.domain import florist
from florist.notifications.tokens.device_tokens import DeviceTokenSet

logger = structlog.get_logger(__name__)


@florist.command(part_of="DeviceTokenSet")
class RegisterDeviceToken:
    recipient_id: Identifier(required=True)
    token: String(required=True, max_length=4096)


@florist.command(part_of="DeviceTokenSet")
class UnregisterDeviceToken:
    recipient_id: Identifier(required=True)
    token: String(required=True, max_length=4096)


@florist.command(part_of="DeviceTokenSet")
class PruneDeviceTokens:
    recipient_ids: Text(required=True)  # JSON: [recipient_id]
    tokens: Text(required=True)  # JSON: [token]


def find_token_set(recipient_id) -> DeviceTokenSet | None:
    try:
        return current_domain.repository_for(DeviceTokenSet).get(recipient_id)
    except ObjectNotFoundError:
        return None


def _json_list(raw, field_name) -> list[str]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError({field_name: [f"Invalid JSON: {exc.msg}"]}) from exc
    if not isinstance(value, list):
        raise ValidationError({field_name: ["Expected a list"]})
    return [str(v) for v in value]


@florist.command_handler(part_of=DeviceTokenSet)
class DeviceTokenHandler:
    @handle(RegisterDeviceToken)
    def register(self, command):
        token = command.token.strip()
        if not token:
            raise ValidationError({"token": ["Token cannot be blank"]})

        token_set = find_token_set(command.recipient_id) or DeviceTokenSet(recipient_id=command.recipient_id)
        token_set.add(token)
        current_domain.repository_for(DeviceTokenSet).add(token_set)
        return token_set.token_list()

    @handle(UnregisterDeviceToken)
    def unregister(self, command):
        token_set = find_token_set(command.recipient_id)
        if token_set is None:
            return []

        token_set.remove(command.token.strip())
        current_domain.repository_for(DeviceTokenSet).add(token_set)
        return token_set.token_list()

    @handle(PruneDeviceTokens)
    def prune(self, command):
        tokens = _json_list(command.tokens, "tokens")
        repo = current_domain.repository_for(DeviceTokenSet)

        pruned = 0
        for recipient_id in _json_list(command.recipient_ids, "recipient_ids"):
            token_set = find_token_set(recipient_id)
            if token_set is None:
                continue
            removed = token_set.remove(*tokens, reason="pruned")
            if removed:
                repo.add(token_set)
                pruned += len(removed)

        logger.info("device_tokens_pruned", tokens=len(tokens), removed=pruned)
        return pruned
