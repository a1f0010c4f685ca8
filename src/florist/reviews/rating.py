"""Keeps each bouquet's rating summary in step with its reviews.

The summary is recalculated from every stored review rather than
incremented, so a replayed event leaves it unchanged.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from florist.catalogue.bouquet import Bouquet
from florist.domain import florist
from florist.reviews.events import ReviewSubmitted
from florist.reviews.review import Review

logger = structlog.get_logger(__name__)


def reviews_of(bouquet_id) -> list[Review]:
    return current_domain.repository_for(Review)._dao.query.filter(bouquet_id=str(bouquet_id)).all().items


def rating_summary(reviews) -> dict:
    """``{"average", "count"}``; the average is rounded to one decimal and is 0 without reviews."""
    count = len(reviews)
    if count == 0:
        return {"average": 0.0, "count": 0}
    return {"average": round(sum(r.rating for r in reviews) / count, 1), "count": count}


@florist.event_handler(part_of=Review)
class BouquetRatingHandler:
    @handle(ReviewSubmitted)
    def on_review_submitted(self, event: ReviewSubmitted) -> None:
        repo = current_domain.repository_for(Bouquet)
        try:
            bouquet = repo.get(event.bouquet_id)
        except ObjectNotFoundError:
            logger.warning("rating_bouquet_missing", bouquet_id=str(event.bouquet_id))
            return

        summary = rating_summary(reviews_of(event.bouquet_id))
        bouquet.record_rating(summary["average"], summary["count"])
        repo.add(bouquet)
        logger.info("bouquet_rating_updated", bouquet_id=str(event.bouquet_id), **summary)
