"""RespondToReview: publish an official store response under a review."""

from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.config import get_settings
from reviews.domain import reviews
from reviews.review.attachments import ReviewResponse
from reviews.review.review import Review


@reviews.command(part_of="Review")
class RespondToReview:
    review_id = Identifier(required=True)
    body = Text(required=True)
    responder_name = String(max_length=100)


@reviews.command_handler(part_of=Review)
class RespondToReviewHandler:
    @handle(RespondToReview)
    def respond_to_review(self, command):
        # Raises ObjectNotFoundError for an unknown review
        review = current_domain.repository_for(Review).get(command.review_id)

        response = ReviewResponse.compose(
            review_id=str(review.id),
            responder_name=(command.responder_name or "").strip() or get_settings().responder_name,
            body=command.body.strip(),
        )
        current_domain.repository_for(ReviewResponse).add(response)
        return str(response.id)
