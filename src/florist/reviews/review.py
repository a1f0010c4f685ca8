"""Review aggregate: one customer's rating and comment for a bouquet.

A customer reviews a bouquet at most once, and only after an order
containing it was delivered (see ``florist.reviews.submission``).
"""

from datetime import datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from florist.domain import florist

MIN_RATING = 1
MAX_RATING = 5
DEFAULT_REVIEWER_NAME = "User"


@florist.aggregate
class Review:
    bouquet_id: Identifier(required=True)
    reviewer_id: Identifier(required=True)
    reviewer_name: String(max_length=255, default=DEFAULT_REVIEWER_NAME)
    rating: Integer(required=True)
    comment: Text()
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is None or not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})

    @classmethod
    def submit(cls, bouquet_id, reviewer_id, rating, comment=None, reviewer_name=None):
        from florist.reviews.events import ReviewSubmitted

        now = datetime.now()
        review = cls(
            bouquet_id=bouquet_id,
            reviewer_id=reviewer_id,
            reviewer_name=(reviewer_name or "").strip() or DEFAULT_REVIEWER_NAME,
            rating=rating,
            comment=comment,
            created_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=review.id,
                bouquet_id=bouquet_id,
                reviewer_id=reviewer_id,
                rating=rating,
                submitted_at=now,
            )
        )
        return review
