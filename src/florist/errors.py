"""Error kinds raised by the florist core.

NotFound errors extend Protean's ``ObjectNotFoundError`` and invalid input is
reported with Protean's ``ValidationError``, so both are handled the same way
whether they come from a repository lookup or from domain code. The API layer
translates each kind into a client or server error (see ``florist.api.errors``).
"""

from protean.exceptions import ObjectNotFoundError


class MaterialNotFound(ObjectNotFoundError):
    """A referenced material does not exist in the catalog."""


class BouquetNotFound(ObjectNotFoundError):
    """A referenced bouquet does not exist."""


class CartItemNotFound(ObjectNotFoundError):
    """A referenced cart item does not exist."""


class OrderNotFound(ObjectNotFoundError):
    """A referenced order does not exist."""


class UpstreamFailure(Exception):
    """A call to the payment gateway, push gateway or catalog failed."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class PersistenceFailure(Exception):
    """A read or write against the document store failed."""


class DuplicateReview(Exception):
    """The customer has already reviewed this bouquet."""


class ReviewNotAllowed(Exception):
    """The customer has no delivered order containing the bouquet."""
