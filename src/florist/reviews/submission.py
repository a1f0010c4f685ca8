"""SubmitReview: a customer rates a bouquet they have received.

Checked in order: the bouquet exists, the customer has not reviewed it
yet, and one of the customer's orders containing it has been delivered.
"""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from florist.catalogue.composition import load_bouquet
from florist.domain import florist
from florist.errors import DuplicateReview, ReviewNotAllowed
from florist.order.order import Order
from florist.order.status import OrderStatus
from florist.reviews.review import Review

REVIEWABLE_STATUSES = frozenset(
    {
        OrderStatus.DELIVERED.value,
        OrderStatus.DONE.value,
        OrderStatus.COMPLETED.value,
    }
)


@florist.command(part_of="Review")
class SubmitReview:
    bouquet_id: Identifier(required=True)
    reviewer_id: Identifier(required=True)
    reviewer_name: String(max_length=255)
    rating: Integer(required=True)
    comment: Text()


def has_received(owner_id, bouquet_id) -> bool:
    orders = current_domain.repository_for(Order)._dao.query.filter(owner_id=str(owner_id)).all().items
    for order in orders:
        if order.status not in REVIEWABLE_STATUSES:
            continue
        if any(str(item.bouquet_id) == str(bouquet_id) for item in order.line_items):
            return True
    return False


@florist.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        bouquet = load_bouquet(command.bouquet_id)
        repo = current_domain.repository_for(Review)

        existing = repo._dao.query.filter(
            bouquet_id=str(bouquet.id),
            reviewer_id=str(command.reviewer_id),
        ).all()
        if existing.items:
            raise DuplicateReview("You have already reviewed this bouquet")

        if not has_received(command.reviewer_id, bouquet.id):
            raise ReviewNotAllowed("Only customers whose order with this bouquet was delivered can review it")

        review = Review.submit(
            bouquet_id=str(bouquet.id),
            reviewer_id=command.reviewer_id,
            rating=command.rating,
            comment=command.comment,
            reviewer_name=command.reviewer_name,
        )
        repo.add(review)
        return str(review.id)
