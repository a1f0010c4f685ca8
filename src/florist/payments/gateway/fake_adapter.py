"""Configurable fake payment gateway for development and testing.

Simulates the gateway without any external calls. It can be configured to
fail, and it records every call so tests can assert on what was requested.
Webhooks are accepted when ``signature_key`` is ``"test-signature"``.
"""

from uuid import uuid4

from florist.payments.gateway.port import PaymentGateway, TransactionResult

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_transaction(
        self,
        order_id: str,
        amount: int,
        payment_type: str | None = None,
        options: dict | None = None,
    ) -> TransactionResult:
        self.calls.append(
            {
                "method": "create_transaction",
                "order_id": order_id,
                "amount": amount,
                "payment_type": payment_type,
                "options": options or {},
            }
        )

        if not self.should_succeed:
            return TransactionResult(success=False, failure_reason=self.failure_reason)

        token = f"fake_token_{uuid4().hex[:12]}"
        return TransactionResult(
            success=True,
            token=token,
            redirect_url=f"https://pay.example.test/{token}",
            transaction_id=f"fake_txn_{uuid4().hex[:12]}",
            provider_status="pending",
        )

    def verify_webhook_signature(self, payload: dict) -> bool:
        return payload.get("signature_key") == TEST_SIGNATURE
