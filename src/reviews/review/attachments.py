"""Review images and official responses.

Both are stored apart from the Review aggregate, keyed by review id, so a
page of reviews can be enriched with one batched lookup per kind instead
of one lookup per review.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from reviews.domain import reviews
from reviews.utils.db import iter_all

MIN_RESPONSE_LENGTH = 2


@reviews.aggregate
class ReviewImage:
    """A photo URL attached to a review at submission. Upload happens elsewhere."""

    review_id = Identifier(required=True)
    url = String(required=True, max_length=500)
    sort_order = Integer(default=0, min_value=0)


@reviews.aggregate
class ReviewResponse:
    """An official reply from the store to a review."""

    review_id = Identifier(required=True)
    responder_name = String(required=True, max_length=100)
    body = Text(required=True)
    created_at = DateTime(required=True)

    @invariant.post
    def body_minimum_length(self):
        if self.body is not None and len(self.body.strip()) < MIN_RESPONSE_LENGTH:
            raise ValidationError({"body": ["Response text must be at least 2 characters"]})

    @classmethod
    def compose(cls, review_id, responder_name, body):
        return cls(
            review_id=review_id,
            responder_name=responder_name,
            body=body,
            created_at=datetime.now(UTC),
        )


def _group_by_review(records, review_ids, sort_key):
    grouped = {str(review_id): [] for review_id in review_ids}
    for record in records:
        grouped.setdefault(str(record.review_id), []).append(record)
    for items in grouped.values():
        items.sort(key=sort_key)
    return grouped


@reviews.repository(part_of=ReviewImage)
class ReviewImageRepository:
    def for_reviews(self, review_ids) -> dict[str, list[ReviewImage]]:
        """Images for every id in `review_ids`, ordered by sort_order."""
        review_ids = [str(review_id) for review_id in review_ids]
        if not review_ids:
            return {}
        records = iter_all(self._dao.query.filter(review_id__in=review_ids), order_by="id")
        return _group_by_review(records, review_ids, sort_key=lambda image: image.sort_order or 0)


@reviews.repository(part_of=ReviewResponse)
class ReviewResponseRepository:
    def for_reviews(self, review_ids) -> dict[str, list[ReviewResponse]]:
        """Responses for every id in `review_ids`, oldest first."""
        review_ids = [str(review_id) for review_id in review_ids]
        if not review_ids:
            return {}
        records = iter_all(self._dao.query.filter(review_id__in=review_ids), order_by="id")
        return _group_by_review(records, review_ids, sort_key=lambda response: response.created_at)
