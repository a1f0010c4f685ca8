"""Push notification channel port: abstract interface for batch push dispatch.

One ``send_batch`` call delivers the same message to many device tokens and
reports the outcome per token. Which provider API is behind it is decided
once, when the adapter is chosen (see ``florist.notifications.channel``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

TOKEN_NOT_REGISTERED = "registration-token-not-registered"

# Failure codes after which a token will never work again
PERMANENT_FAILURE_CODES = frozenset({TOKEN_NOT_REGISTERED})


@dataclass(frozen=True)
class PushMessage:
    """A data message with a visible notification fallback.

    ``data`` values are strings. ``collapse_key`` lets a newer message for
    the same order replace an older one on the device.
    """

    title: str
    body: str
    data: dict[str, str] = field(default_factory=dict)
    collapse_key: str | None = None
    ttl_seconds: int | None = None
    channel_id: str | None = None
    priority: str = "high"


@dataclass(frozen=True)
class TokenResult:
    token: str
    success: bool
    message_id: str | None = None
    error_code: str | None = None

    @property
    def is_permanent_failure(self) -> bool:
        return not self.success and self.error_code in PERMANENT_FAILURE_CODES


@dataclass(frozen=True)
class BatchResult:
    success_count: int = 0
    failure_count: int = 0
    responses: tuple[TokenResult, ...] = ()

    @property
    def permanently_failed_tokens(self) -> list[str]:
        return [r.token for r in self.responses if r.is_permanent_failure]


class PushGateway(ABC):
    """Abstract interface for batch push dispatch adapters."""

    @abstractmethod
    def send_batch(self, tokens: list[str], message: PushMessage) -> BatchResult:
        """Send ``message`` to every token.

        Per-token failures are reported in the result. A failure of the whole
        call raises ``UpstreamFailure``.
        """
        ...
