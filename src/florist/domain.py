"""Florist bounded context: bouquet catalogue, cart, orders and order notifications.

Prices bouquets from their bill of materials, freezes cart prices into
orders, reconciles order status with payment-gateway callbacks, and fans
out push notifications to customers and staff on every status change.
"""

from protean.domain import Domain

from florist.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
florist = Domain(name="florist")
