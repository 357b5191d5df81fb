"""SubmitReview: submit a new product review.

The submission is validated in full before the order ledger is consulted,
so malformed input never costs an external call. The verified-purchase
flag is resolved once here and stored with the review.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.config import get_settings
from reviews.domain import reviews
from reviews.ledger import get_order_ledger
from reviews.review.attachments import ReviewImage
from reviews.review.review import FitFeedback, Review, submission_errors
from reviews.review.verification import VerifiedPurchaseResolver

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier()
    reviewer_name = String(max_length=100)
    reviewer_email = String(max_length=254)
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(max_length=200)
    body = Text(required=True)
    quality_rating = Integer(min_value=1, max_value=5)
    comfort_rating = Integer(min_value=1, max_value=5)
    style_rating = Integer(min_value=1, max_value=5)
    size_purchased = String(max_length=50)
    color_purchased = String(max_length=50)
    fit_feedback = String(choices=FitFeedback)
    image_urls = Text()  # JSON array of URLs, in display order


def parse_image_urls(raw) -> list[str]:
    if not raw:
        return []
    try:
        urls = json.loads(raw)
    except ValueError as exc:
        raise ValidationError({"image_urls": ["Image URLs must be a JSON array"]}) from exc
    if not isinstance(urls, list) or not all(isinstance(url, str) and url.strip() for url in urls):
        raise ValidationError({"image_urls": ["Image URLs must be non-empty strings"]})
    return [url.strip() for url in urls]


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        image_urls = parse_image_urls(command.image_urls)

        errors = submission_errors(
            user_id=command.user_id,
            reviewer_name=command.reviewer_name or None,
            reviewer_email=command.reviewer_email or None,
            body=command.body,
            image_count=len(image_urls),
        )
        if errors:
            raise ValidationError(errors)

        verified = VerifiedPurchaseResolver(get_order_ledger()).resolve(
            command.user_id, command.product_id
        )

        review = Review.submit(
            product_id=command.product_id,
            user_id=command.user_id,
            reviewer_name=command.reviewer_name,
            reviewer_email=command.reviewer_email,
            rating=command.rating,
            title=command.title,
            body=command.body,
            quality_rating=command.quality_rating,
            comfort_rating=command.comfort_rating,
            style_rating=command.style_rating,
            size_purchased=command.size_purchased,
            color_purchased=command.color_purchased,
            fit_feedback=command.fit_feedback,
            image_count=len(image_urls),
            verified_purchase=verified,
            is_approved=get_settings().auto_approve,
        )
        current_domain.repository_for(Review).add(review)

        image_repo = current_domain.repository_for(ReviewImage)
        for position, url in enumerate(image_urls):
            image_repo.add(ReviewImage(review_id=str(review.id), url=url, sort_order=position))

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            verified_purchase=verified,
            image_count=len(image_urls),
        )
        return str(review.id)
