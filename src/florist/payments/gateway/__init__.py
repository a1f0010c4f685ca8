"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- MidtransGateway when ``FLORIST_PAYMENT_PROVIDER=midtrans``
"""

from florist.config import get_settings
from florist.payments.gateway.fake_adapter import FakeGateway
from florist.payments.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, chosen from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.payment_provider == "midtrans":
            from florist.payments.gateway.midtrans_adapter import MidtransGateway

            _current_gateway = MidtransGateway(settings)
        else:
            _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
