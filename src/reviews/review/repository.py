"""Repository for the Review aggregate.

Filters that the store can evaluate are pushed into the query; ordering
and pagination happen afterwards over the complete filtered set so that a
page is never short because of a filter.
"""

from reviews.domain import reviews
from reviews.review.review import Review
from reviews.utils.db import iter_all


@reviews.repository(part_of=Review)
class ReviewRepository:
    def approved_for_product(
        self,
        product_id,
        verified_only: bool = False,
        min_rating: int | None = None,
        fit: str | None = None,
        photos_only: bool = False,
    ) -> list[Review]:
        criteria = {"product_id": str(product_id), "is_approved": True}
        if verified_only:
            criteria["verified_purchase"] = True
        if min_rating is not None:
            criteria["rating__gte"] = min_rating
        if fit:
            criteria["fit_feedback"] = fit
        if photos_only:
            criteria["image_count__gte"] = 1

        return list(iter_all(self._dao.query.filter(**criteria), order_by="id"))

    def everything(self) -> list[Review]:
        """All reviews regardless of approval, for moderation screens."""
        return list(iter_all(self._dao.query, order_by="id"))
