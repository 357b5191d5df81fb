"""Review aggregate: the core of the Reviews & Ratings domain.

A Review records one customer's rating and opinion of a product. Core
content is written once at submission; the verified-purchase flag is
resolved at that moment and frozen. After submission only two things
change: the approval flag (moderation) and the helpfulness tallies, which
are always recounted from the vote set rather than incremented.

Votes are keyed by (review, voter). A voter is a registered user id or,
for anonymous visitors, a normalized IP address. A later vote from the
same voter overwrites the earlier one.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from reviews.domain import reviews
from reviews.review.events import (
    HelpfulVoteRecorded,
    ReviewApproved,
    ReviewHidden,
    ReviewSubmitted,
)
from reviews.review.voter import vote_key

MAX_IMAGES = 4
MIN_BODY_LENGTH = 10
MIN_REVIEWER_NAME_LENGTH = 2


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class FitFeedback(Enum):
    TOO_SMALL = "too_small"
    PERFECT = "perfect"
    TOO_LARGE = "too_large"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class HelpfulnessVote:
    """One voter's current judgement of a review.

    `vote_id` is derived from the review and the voter, so the store's
    primary key admits at most one vote per voter per review.
    """

    vote_id = Identifier(identifier=True, required=True)
    user_id = Identifier()
    voter_ip = String(max_length=45)
    is_helpful = Boolean(default=False)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    # Core identifiers
    product_id = Identifier(required=True)
    user_id = Identifier()

    # Guest authorship
    reviewer_name = String(max_length=100)
    reviewer_email = String(max_length=254)

    # Ratings
    rating = Integer(required=True, min_value=1, max_value=5)
    quality_rating = Integer(min_value=1, max_value=5)
    comfort_rating = Integer(min_value=1, max_value=5)
    style_rating = Integer(min_value=1, max_value=5)

    # Content
    title = String(max_length=200)
    body = Text(required=True)
    size_purchased = String(max_length=50)
    color_purchased = String(max_length=50)
    fit_feedback = String(choices=FitFeedback)

    # Media (rows live in ReviewImage; the count drives photo filtering)
    image_count = Integer(default=0, min_value=0)

    # Verification and moderation
    verified_purchase = Boolean(default=False)
    is_approved = Boolean(default=True)

    # Voting
    votes = HasMany(HelpfulnessVote)
    helpful_count = Integer(default=0, min_value=0)
    unhelpful_count = Integer(default=0, min_value=0)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def submission_must_be_well_formed(self):
        errors = submission_errors(
            user_id=self.user_id,
            reviewer_name=self.reviewer_name,
            reviewer_email=self.reviewer_email,
            body=self.body,
            image_count=self.image_count or 0,
        )
        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        rating,
        body,
        user_id=None,
        reviewer_name=None,
        reviewer_email=None,
        title=None,
        quality_rating=None,
        comfort_rating=None,
        style_rating=None,
        size_purchased=None,
        color_purchased=None,
        fit_feedback=None,
        image_count=0,
        verified_purchase=False,
        is_approved=True,
    ):
        """Submit a new review. `verified_purchase` is final once the review exists."""
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            user_id=user_id,
            reviewer_name=reviewer_name or None,
            reviewer_email=reviewer_email or None,
            rating=rating,
            quality_rating=quality_rating,
            comfort_rating=comfort_rating,
            style_rating=style_rating,
            title=title or None,
            body=body,
            size_purchased=size_purchased or None,
            color_purchased=color_purchased or None,
            fit_feedback=fit_feedback or None,
            image_count=image_count,
            verified_purchase=bool(user_id) and verified_purchase,
            is_approved=is_approved,
            helpful_count=0,
            unhelpful_count=0,
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id) if user_id else None,
                rating=rating,
                verified_purchase=review.verified_purchase,
                is_approved=review.is_approved,
                image_count=image_count,
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def approve(self):
        """Publish the review. Approving an approved review is a no-op."""
        if self.is_approved:
            return

        now = datetime.now(UTC)
        self.is_approved = True
        self.updated_at = now

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                approved_at=now,
            )
        )

    def hide(self):
        """Withdraw the review from listings and summaries."""
        if not self.is_approved:
            return

        now = datetime.now(UTC)
        self.is_approved = False
        self.updated_at = now

        self.raise_(
            ReviewHidden(
                review_id=str(self.id),
                product_id=str(self.product_id),
                hidden_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def vote(self, is_helpful, user_id=None, voter_ip=None):
        """Record `is_helpful` for the voter, replacing any earlier vote.

        Exactly one of `user_id` / `voter_ip` identifies the voter; the IP is
        only used when there is no user. Tallies are recounted from the full
        vote set afterwards.
        """
        key = vote_key(self.id, user_id=user_id, voter_ip=voter_ip)
        now = datetime.now(UTC)

        existing = next((v for v in self.votes if str(v.vote_id) == key), None)

        with atomic_change(self):
            if existing:
                existing.is_helpful = bool(is_helpful)
                existing.voted_at = now
            else:
                self.add_votes(
                    HelpfulnessVote(
                        vote_id=key,
                        user_id=user_id or None,
                        voter_ip=None if user_id else voter_ip,
                        is_helpful=bool(is_helpful),
                        voted_at=now,
                    )
                )

            self.helpful_count, self.unhelpful_count = self.tally_votes()
            self.updated_at = now

        self.raise_(
            HelpfulVoteRecorded(
                review_id=str(self.id),
                voter_key=key,
                is_helpful=bool(is_helpful),
                helpful_count=self.helpful_count,
                unhelpful_count=self.unhelpful_count,
                voted_at=now,
            )
        )

        return {"helpful": self.helpful_count, "unhelpful": self.unhelpful_count}

    def tally_votes(self):
        helpful = sum(1 for v in self.votes if v.is_helpful)
        return helpful, len(self.votes) - helpful


def is_plausible_email(address: str) -> bool:
    """Structural check: one @, non-empty local part, dotted domain, no whitespace."""
    if any(ch.isspace() for ch in address) or address.count("@") != 1:
        return False
    local_part, domain_part = address.split("@", 1)
    if not local_part or not domain_part or ".." in domain_part:
        return False
    return "." in domain_part.strip(".") and not domain_part.startswith(".") and not domain_part.endswith(".")


def submission_errors(user_id, reviewer_name, reviewer_email, body, image_count) -> dict:
    """Field errors for a review submission, keyed by field. Empty when well formed."""
    errors = {}

    if not user_id and not (reviewer_name and reviewer_email):
        errors["author"] = ["Guest reviews need a reviewer name and email"]

    if reviewer_name is not None and len(reviewer_name.strip()) < MIN_REVIEWER_NAME_LENGTH:
        errors["reviewer_name"] = [
            f"Reviewer name must be at least {MIN_REVIEWER_NAME_LENGTH} characters"
        ]

    if reviewer_email and not is_plausible_email(reviewer_email):
        errors["reviewer_email"] = ["Reviewer email is not a valid address"]

    if body is None or len(body.strip()) < MIN_BODY_LENGTH:
        errors["body"] = [f"Review body must be at least {MIN_BODY_LENGTH} characters"]

    if image_count > MAX_IMAGES:
        errors["image_urls"] = [f"A review can carry at most {MAX_IMAGES} images"]

    return errors
