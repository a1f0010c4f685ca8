"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from florist.domain import florist


@florist.event(part_of="Review")
class ReviewSubmitted:
    """A customer who received a bouquet reviewed it."""

    __version__ = 1

    review_id = Identifier(required=True)
    bouquet_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    rating = Integer(required=True)
    submitted_at = DateTime(required=True)
