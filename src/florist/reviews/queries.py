"""Read-side views of reviews."""

from florist.catalogue.composition import load_bouquet
from florist.reviews.rating import rating_summary, reviews_of
from florist.reviews.review import Review

DEFAULT_REVIEW_LIMIT = 100
MAX_REVIEW_LIMIT = 500


def review_view(review: Review) -> dict:
    return {
        "review_id": str(review.id),
        "bouquet_id": str(review.bouquet_id),
        "reviewer_id": str(review.reviewer_id),
        "reviewer_name": review.reviewer_name,
        "rating": review.rating,
        "comment": review.comment,
        "created_at": review.created_at.isoformat() if review.created_at else None,
    }


def reviews_for_bouquet(bouquet_id, limit: int | None = DEFAULT_REVIEW_LIMIT) -> dict:
    """Rating summary over all reviews plus the newest ``limit`` of them."""
    bouquet = load_bouquet(bouquet_id)
    reviews = sorted(reviews_of(bouquet.id), key=lambda r: r.created_at, reverse=True)
    limit = min(limit or DEFAULT_REVIEW_LIMIT, MAX_REVIEW_LIMIT)
    return {
        "summary": rating_summary(reviews),
        "reviews": [review_view(r) for r in reviews[:limit]],
    }
