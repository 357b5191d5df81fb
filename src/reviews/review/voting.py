"""VoteOnReview: record a helpful/unhelpful vote on a review.

A voter is the registered user when there is one, otherwise the request's
normalized IP address. Voting again replaces the earlier vote. Two writers
racing on the same review are serialized by the aggregate version: the
stale one fails with ExpectedVersionError and `cast_vote` replays it
against the fresh aggregate.
"""

import structlog
from protean.exceptions import ExpectedVersionError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.config import get_settings
from reviews.domain import reviews
from reviews.review.review import Review
from reviews.review.voter import resolve_voter

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class VoteOnReview:
    review_id = Identifier(required=True)
    user_id = Identifier()
    client_ip = String(max_length=64)
    is_helpful = Boolean(default=True)


@reviews.command_handler(part_of=Review)
class VoteOnReviewHandler:
    @handle(VoteOnReview)
    def vote_on_review(self, command):
        user_id, voter_ip = resolve_voter(command.user_id, command.client_ip)

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        tally = review.vote(
            is_helpful=command.is_helpful,
            user_id=user_id,
            voter_ip=voter_ip,
        )

        repo.add(review)
        return tally


def cast_vote(review_id, is_helpful=True, user_id=None, client_ip=None) -> dict:
    """Process a VoteOnReview, retrying when a concurrent vote got there first."""
    attempts = max(1, get_settings().vote_retries)
    command = VoteOnReview(
        review_id=review_id,
        user_id=user_id,
        client_ip=client_ip,
        is_helpful=is_helpful,
    )

    for attempt in range(1, attempts + 1):
        try:
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError:
            if attempt == attempts:
                raise
            logger.info("Concurrent vote detected, retrying", review_id=str(review_id), attempt=attempt)
