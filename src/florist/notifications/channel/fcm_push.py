"""Firebase Cloud Messaging adapters (firebase-admin SDK).

Two adapters share the message building and differ only in the bulk-send
call: ``FcmPushGateway`` uses ``send_each_for_multicast``; the legacy
adapter uses ``send_multicast``, which only firebase-admin 6.x ships. The
settings pick one of them at startup.
"""

from datetime import timedelta

import firebase_admin
import structlog
from firebase_admin import credentials, exceptions, messaging
from protean.exceptions import ConfigurationError

from florist.config import Settings
from florist.errors import UpstreamFailure
from florist.notifications.channel.push_port import (
    TOKEN_NOT_REGISTERED,
    BatchResult,
    PushGateway,
    PushMessage,
    TokenResult,
)

logger = structlog.get_logger(__name__)


def _firebase_app(settings: Settings):
    try:
        return firebase_admin.get_app()
    except ValueError:
        cred = credentials.Certificate(settings.fcm_credentials_file) if settings.fcm_credentials_file else None
        return firebase_admin.initialize_app(cred)


def _error_code(exc) -> str | None:
    if exc is None:
        return None
    if isinstance(exc, messaging.UnregisteredError):
        return TOKEN_NOT_REGISTERED
    return getattr(exc, "code", None) or type(exc).__name__


class FcmPushGateway(PushGateway):
    def __init__(self, settings: Settings):
        self.settings = settings
        self.app = _firebase_app(settings)

    def build(self, tokens: list[str], message: PushMessage) -> messaging.MulticastMessage:
        android_notification = messaging.AndroidNotification(
            channel_id=message.channel_id or self.settings.android_channel_id,
            tag=message.collapse_key,
        )
        return messaging.MulticastMessage(
            tokens=list(tokens),
            data={key: str(value) for key, value in message.data.items()},
            notification=messaging.Notification(title=message.title, body=message.body),
            android=messaging.AndroidConfig(
                priority=message.priority,
                collapse_key=message.collapse_key,
                ttl=timedelta(seconds=message.ttl_seconds) if message.ttl_seconds else None,
                notification=android_notification,
            ),
        )

    def _dispatch(self, multicast: messaging.MulticastMessage) -> messaging.BatchResponse:
        return messaging.send_each_for_multicast(multicast, app=self.app)

    def send_batch(self, tokens: list[str], message: PushMessage) -> BatchResult:
        try:
            response = self._dispatch(self.build(tokens, message))
        except exceptions.FirebaseError as exc:
            logger.error("fcm_batch_failed", tokens=len(tokens), error=str(exc))
            raise UpstreamFailure(f"FCM request failed: {exc}", provider="fcm") from exc

        results = tuple(
            TokenResult(
                token=token,
                success=send_response.success,
                message_id=send_response.message_id,
                error_code=_error_code(send_response.exception),
            )
            for token, send_response in zip(tokens, response.responses, strict=True)
        )
        return BatchResult(
            success_count=response.success_count,
            failure_count=response.failure_count,
            responses=results,
        )


class LegacyFcmPushGateway(FcmPushGateway):
    def __init__(self, settings: Settings):
        if not hasattr(messaging, "send_multicast"):
            raise ConfigurationError("FLORIST_FCM_API=legacy needs a firebase-admin release with send_multicast")
        super().__init__(settings)

    def _dispatch(self, multicast: messaging.MulticastMessage) -> messaging.BatchResponse:
        return messaging.send_multicast(multicast, app=self.app)
