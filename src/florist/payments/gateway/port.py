"""Payment gateway port (abstract interface).

Order placement asks the gateway for a transaction before the order is
stored; the gateway later reports payment progress through webhooks whose
authenticity it verifies. Adapters: ``FakeGateway`` for development and
tests, ``MidtransGateway`` for production.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TransactionResult:
    """Result of a transaction request."""

    success: bool
    token: str | None = None
    redirect_url: str | None = None
    transaction_id: str | None = None
    provider_status: str | None = None
    failure_reason: str | None = None
    actions: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_transaction(
        self,
        order_id: str,
        amount: int,
        payment_type: str | None = None,
        options: dict | None = None,
    ) -> TransactionResult:
        """Open a payment transaction for ``amount`` (smallest currency unit).

        ``payment_type`` selects a direct charge (``bank_transfer``,
        ``gopay``, ``qris``, ``echannel``); without it the customer picks a
        method on the gateway's hosted page. ``options`` carries customer
        details, line items and method-specific settings such as ``bank``.
        """
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: dict) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...
