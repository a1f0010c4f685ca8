"""Tests for the Review aggregate and the rating summary."""

import pytest
from protean.exceptions import ValidationError

from florist.reviews.events import ReviewSubmitted
from florist.reviews.rating import rating_summary
from florist.reviews.review import DEFAULT_REVIEWER_NAME, Review


def _review(rating=5, **overrides):
    attrs = {"bouquet_id": "bouquet-1", "reviewer_id": "user-1", "rating": rating}
    attrs.update(overrides)
    return Review.submit(**attrs)


class TestReview:
    def test_submit(self):
        review = _review(4, comment="Fresh and pretty", reviewer_name="Ayu")
        assert review.rating == 4
        assert review.comment == "Fresh and pretty"
        assert review.reviewer_name == "Ayu"
        assert review.created_at is not None

    def test_reviewer_name_defaults(self):
        assert _review().reviewer_name == DEFAULT_REVIEWER_NAME
        assert _review(reviewer_name="   ").reviewer_name == "User"

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range_rejected(self, rating):
        with pytest.raises(ValidationError) as exc:
            _review(rating)
        assert "rating" in exc.value.messages

    def test_raises_submitted_event(self):
        review = _review(3)
        [event] = review._events
        assert isinstance(event, ReviewSubmitted)
        assert event.bouquet_id == "bouquet-1"
        assert event.rating == 3


class TestRatingSummary:
    def test_empty(self):
        assert rating_summary([]) == {"average": 0.0, "count": 0}

    def test_average_rounded_to_one_decimal(self):
        reviews = [_review(5), _review(4), _review(4)]
        assert rating_summary(reviews) == {"average": 4.3, "count": 3}
