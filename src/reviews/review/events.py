"""Domain events for the Review aggregate.

Events are versioned, immutable facts. They are published for downstream
consumers (storefront caches, notification fan-out); the review summary
itself is recomputed on demand and does not depend on them.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer or guest submitted a review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    user_id = Identifier()
    rating = Integer(required=True)
    verified_purchase = Boolean(default=False)
    is_approved = Boolean(default=False)
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewApproved:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    approved_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewHidden:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    hidden_at = DateTime(required=True)


@reviews.event(part_of="Review")
class HelpfulVoteRecorded:
    """A voter's helpfulness judgement was recorded (inserted or replaced)."""

    __version__ = 1

    review_id = Identifier(required=True)
    voter_key = String(required=True, max_length=255)
    is_helpful = Boolean(default=False)
    helpful_count = Integer(required=True)
    unhelpful_count = Integer(required=True)
    voted_at = DateTime(required=True)
