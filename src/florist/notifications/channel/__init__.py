"""Push gateway registry.

Provides singleton access to the push adapter. The fake adapter is used by
default; ``FLORIST_PUSH_PROVIDER=fcm`` selects Firebase Cloud Messaging and
``FLORIST_FCM_API`` picks the bulk-send call once, at first use.
"""

from florist.config import get_settings
from florist.notifications.channel.push_port import PushGateway

_push_gateway: PushGateway | None = None


def get_push_gateway() -> PushGateway:
    """Return the configured push adapter (singleton)."""
    global _push_gateway
    if _push_gateway is None:
        settings = get_settings()
        if settings.push_provider == "fcm":
            from florist.notifications.channel.fcm_push import FcmPushGateway, LegacyFcmPushGateway

            adapter_cls = LegacyFcmPushGateway if settings.fcm_api == "legacy" else FcmPushGateway
            _push_gateway = adapter_cls(settings)
        else:
            from florist.notifications.channel.fake_push import FakePushGateway

            _push_gateway = FakePushGateway()
    return _push_gateway


def set_push_gateway(gateway: PushGateway) -> None:
    """Override the active push adapter (useful for tests)."""
    global _push_gateway
    _push_gateway = gateway


def reset_push_gateway() -> None:
    """Reset the push adapter singleton (useful for testing)."""
    global _push_gateway
    _push_gateway = None
