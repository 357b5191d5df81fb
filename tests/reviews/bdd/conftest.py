"""Shared BDD fixtures and step definitions for the Reviews domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from reviews.review.events import (
    HelpfulVoteRecorded,
    ReviewApproved,
    ReviewHidden,
    ReviewSubmitted,
)
from reviews.review.review import Review
from reviews.review.voter import normalize_ip

_REVIEW_EVENT_CLASSES = {
    "ReviewSubmitted": ReviewSubmitted,
    "ReviewApproved": ReviewApproved,
    "ReviewHidden": ReviewHidden,
    "HelpfulVoteRecorded": HelpfulVoteRecorded,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def is_helpful(judgement: str) -> bool:
    return judgement == "helpful"


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a published review", target_fixture="review")
def published_review():
    review = Review.submit(
        product_id="prod-bdd",
        user_id="author-bdd",
        rating=4,
        body="This is a BDD test review body that is long enough.",
    )
    review._events.clear()
    return review


@given(parsers.cfparse('user "{user_id}" has voted {judgement}'))
def user_has_voted(review, user_id, judgement):
    review.vote(is_helpful=is_helpful(judgement), user_id=user_id)
    review._events.clear()


@given(parsers.cfparse('the guest at "{address}" has voted {judgement}'))
def guest_has_voted(review, address, judgement):
    review.vote(is_helpful=is_helpful(judgement), voter_ip=normalize_ip(address))
    review._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the review action fails with a validation error")
def review_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def review_event_raised(review, event_type):
    event_cls = _REVIEW_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in review._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in review._events]}"


@then(parsers.cfparse("the review helpful count is {count:d}"))
def review_helpful_count(review, count):
    assert review.helpful_count == count


@then(parsers.cfparse("the review unhelpful count is {count:d}"))
def review_unhelpful_count(review, count):
    assert review.unhelpful_count == count


@then(parsers.cfparse("the review holds {count:d} vote"))
@then(parsers.cfparse("the review holds {count:d} votes"))
def review_vote_count(review, count):
    assert len(review.votes) == count


@then(parsers.cfparse('the vote from "{address}" is {judgement}'))
def vote_from_address(review, address, judgement):
    [vote] = [v for v in review.votes if v.voter_ip == normalize_ip(address)]
    assert vote.is_helpful is is_helpful(judgement)
