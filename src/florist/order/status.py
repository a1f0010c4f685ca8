"""Order status vocabulary.

Two writers change an order's status:

- staff, through ``UpdateOrderStatus``, using the shop's fulfillment
  statuses (aliases such as ``dikirim`` or ``cancelled`` are accepted);
- the payment gateway, through webhooks whose ``transaction_status`` is
  translated by ``map_provider_status``. Provider values without a
  translation are stored verbatim.
"""

from enum import Enum

from protean.exceptions import ValidationError


class OrderStatus(Enum):
    WAITING_PAYMENT = "waiting_payment"
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    DONE = "done"
    COMPLETED = "completed"
    CANCELED = "canceled"
    # Written by payment webhooks
    PAID = "dibayar"
    AWAITING_PAYMENT = "menunggu pembayaran"
    EXPIRED = "expired"
    PAYMENT_CANCELED = "dibatalkan"
    PAYMENT_FAILED = "gagal"


KNOWN_STATUSES = frozenset(status.value for status in OrderStatus)

STATUS_ALIASES = {
    "process": OrderStatus.PROCESSING.value,
    "diproses": OrderStatus.PROCESSING.value,
    "shipped": OrderStatus.SHIPPING.value,
    "dikirim": OrderStatus.SHIPPING.value,
    "terkirim": OrderStatus.DELIVERED.value,
    "selesai": OrderStatus.DONE.value,
    "cancelled": OrderStatus.CANCELED.value,
    "batal": OrderStatus.CANCELED.value,
    "menunggu": OrderStatus.PENDING.value,
}

_PROVIDER_STATUS_MAP = {
    "settlement": OrderStatus.PAID.value,
    "pending": OrderStatus.AWAITING_PAYMENT.value,
    "expire": OrderStatus.EXPIRED.value,
    "cancel": OrderStatus.PAYMENT_CANCELED.value,
    "deny": OrderStatus.PAYMENT_FAILED.value,
}


def canonical_status(value) -> str:
    """Lower-case ``value`` and resolve aliases; unknown values are returned as they are."""
    candidate = str(value or "").strip().lower()
    return STATUS_ALIASES.get(candidate, candidate)


def normalize_status(value) -> str:
    """Resolve a staff-supplied status or alias to a known status.

    Raises ``ValidationError`` for anything that is not a known status.
    """
    candidate = canonical_status(value)
    if candidate not in KNOWN_STATUSES:
        raise ValidationError({"status": [f"Unknown order status '{value}'"]})
    return candidate


def map_provider_status(transaction_status: str) -> str:
    """Translate a gateway ``transaction_status``; unknown values pass through unchanged."""
    return _PROVIDER_STATUS_MAP.get(transaction_status, transaction_status)


def payment_channel_for(payload: dict) -> str | None:
    """Human-readable payment channel from a webhook payload.

    Bank transfers report the bank of the first VA number, QRIS reports the
    acquirer, everything else the upper-cased payment type.
    """
    payment_type = payload.get("payment_type")
    if not payment_type:
        return None

    if payment_type == "bank_transfer":
        va_numbers = payload.get("va_numbers") or []
        if va_numbers and va_numbers[0].get("bank"):
            return va_numbers[0]["bank"].upper()
        if payload.get("permata_va_number"):
            return "PERMATA"
        return "BANK_TRANSFER"

    if payment_type == "qris":
        return f"QRIS {(payload.get('acquirer') or '').upper()}".strip()

    return payment_type.upper()
