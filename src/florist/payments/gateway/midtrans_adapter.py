"""Midtrans payment gateway adapter.

Talks to two Midtrans APIs over HTTPS with the server key as Basic auth:

- Snap (``/snap/v1/transactions``) when no payment type is given: returns a
  token and a redirect URL to Midtrans' hosted payment page.
- Core API (``/v2/charge``) for a concrete payment type: returns the
  charge details (VA numbers, QR string, deeplinks) as ``actions``.

Webhook signatures are ``sha512(order_id + status_code + gross_amount + server_key)``.
"""

import hashlib
import hmac

import requests
import structlog

from florist.config import Settings
from florist.payments.gateway.port import PaymentGateway, TransactionResult

logger = structlog.get_logger(__name__)

SANDBOX_SNAP_URL = "https://app.sandbox.midtrans.com/snap/v1/transactions"
PRODUCTION_SNAP_URL = "https://app.midtrans.com/snap/v1/transactions"
SANDBOX_CHARGE_URL = "https://api.sandbox.midtrans.com/v2/charge"
PRODUCTION_CHARGE_URL = "https://api.midtrans.com/v2/charge"

DEFAULT_BANK = "bca"


def signature_for(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    raw = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


class MidtransGateway(PaymentGateway):
    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.server_key = settings.midtrans_server_key
        self.is_production = settings.midtrans_is_production
        self.timeout = settings.http_timeout_seconds
        self.session = session or requests.Session()

    @property
    def snap_url(self) -> str:
        return PRODUCTION_SNAP_URL if self.is_production else SANDBOX_SNAP_URL

    @property
    def charge_url(self) -> str:
        return PRODUCTION_CHARGE_URL if self.is_production else SANDBOX_CHARGE_URL

    def _post(self, url: str, body: dict) -> dict:
        response = self.session.post(
            url,
            json=body,
            auth=(self.server_key, ""),
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _base_body(order_id: str, amount: int, options: dict) -> dict:
        body = {"transaction_details": {"order_id": order_id, "gross_amount": amount}}

        customer = options.get("customer") or {}
        if customer or options.get("address"):
            body["customer_details"] = {
                "first_name": customer.get("name") or "Customer",
                "email": customer.get("email") or "",
                "phone": customer.get("phone") or "",
                "shipping_address": {"address": options.get("address") or ""},
            }
        if options.get("items"):
            body["item_details"] = options["items"]
        return body

    @staticmethod
    def _charge_details(payment_type: str, options: dict) -> dict:
        if payment_type == "bank_transfer":
            return {"bank_transfer": {"bank": options.get("bank") or DEFAULT_BANK}}
        if payment_type == "gopay":
            details = {"enable_callback": bool(options.get("callback_url"))}
            if options.get("callback_url"):
                details["callback_url"] = options["callback_url"]
            return {"gopay": details}
        if payment_type == "qris":
            return {"qris": {}}
        if payment_type == "echannel":
            return {"echannel": {"bill_info1": "Payment:", "bill_info2": options.get("bill_info") or "Bouquet order"}}
        return {}

    def create_transaction(
        self,
        order_id: str,
        amount: int,
        payment_type: str | None = None,
        options: dict | None = None,
    ) -> TransactionResult:
        options = options or {}
        body = self._base_body(order_id, amount, options)

        try:
            if payment_type:
                body["payment_type"] = payment_type
                body.update(self._charge_details(payment_type, options))
                data = self._post(self.charge_url, body)
            else:
                data = self._post(self.snap_url, body)
        except requests.RequestException as exc:
            logger.error(
                "midtrans_request_failed",
                order_id=order_id,
                payment_type=payment_type,
                error=str(exc),
            )
            return TransactionResult(success=False, failure_reason="Payment gateway request failed")

        if payment_type:
            status_code = str(data.get("status_code", ""))
            if not status_code.startswith("2"):
                logger.warning(
                    "midtrans_charge_rejected",
                    order_id=order_id,
                    status_code=status_code,
                    status_message=data.get("status_message"),
                )
                return TransactionResult(success=False, failure_reason="Payment gateway rejected the charge")

            actions = {action.get("name"): action.get("url") for action in data.get("actions", [])}
            if data.get("va_numbers"):
                actions["va_numbers"] = data["va_numbers"]
            if data.get("permata_va_number"):
                actions["permata_va_number"] = data["permata_va_number"]
            if data.get("bill_key"):
                actions["bill_key"] = data["bill_key"]
                actions["biller_code"] = data.get("biller_code")

            return TransactionResult(
                success=True,
                transaction_id=data.get("transaction_id"),
                provider_status=data.get("transaction_status"),
                redirect_url=actions.get("deeplink-redirect") or actions.get("generate-qr-code"),
                actions=actions,
            )

        return TransactionResult(
            success=True,
            token=data.get("token"),
            redirect_url=data.get("redirect_url"),
            provider_status="pending",
        )

    def verify_webhook_signature(self, payload: dict) -> bool:
        received = payload.get("signature_key")
        if not received or not self.server_key:
            return False

        expected = signature_for(
            str(payload.get("order_id", "")),
            str(payload.get("status_code", "")),
            str(payload.get("gross_amount", "")),
            self.server_key,
        )
        return hmac.compare_digest(expected, str(received))
