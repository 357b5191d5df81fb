"""SetReviewApproval: publish or hide a review from the admin screen.

Hidden reviews drop out of listings and summaries but keep their votes,
so approving a review again restores it as it was.
"""

import structlog
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class SetReviewApproval:
    review_id = Identifier(required=True)
    is_approved = Boolean(required=True)


@reviews.command_handler(part_of=Review)
class SetReviewApprovalHandler:
    @handle(SetReviewApproval)
    def set_review_approval(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if command.is_approved:
            review.approve()
        else:
            review.hide()

        repo.add(review)
        logger.info(
            "Review approval changed",
            review_id=str(review.id),
            is_approved=review.is_approved,
        )
        return str(review.id)
