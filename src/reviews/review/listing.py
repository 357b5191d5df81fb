"""Review listing: filter, sort, paginate and enrich a product's reviews.

Every filter, including "photos only", is applied before pagination so a
page is only short when it is the last one. Once the page's review ids are
known, images and responses are loaded with one batched lookup each, and
the two lookups run concurrently.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from reviews.config import get_settings
from reviews.review.attachments import ReviewImage, ReviewResponse
from reviews.review.review import FitFeedback, Review
from reviews.review.store import read_from_store

logger = structlog.get_logger(__name__)


class ReviewSort(Enum):
    NEWEST = "newest"
    HELPFUL = "helpful"


@dataclass(frozen=True)
class ReviewQuery:
    page: int = 1
    limit: int = 10
    sort: ReviewSort = ReviewSort.NEWEST
    photos_only: bool = False
    verified_only: bool = False
    min_rating: int | None = None
    fit: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def build(
        cls,
        page=1,
        limit=None,
        sort="newest",
        photos_only=False,
        verified_only=False,
        min_rating=None,
        fit=None,
    ) -> "ReviewQuery":
        """Validate and normalize listing parameters.

        Page is clamped up to 1 and limit into [1, max_page_size]; an unknown
        sort or fit value, or a minimum rating outside 1–5, is rejected.
        """
        settings = get_settings()
        errors = {}

        page = _as_int(page, "page", errors, default=1)
        limit = _as_int(limit, "limit", errors, default=settings.default_page_size)

        try:
            sort = ReviewSort(sort or ReviewSort.NEWEST.value)
        except ValueError:
            errors["sort"] = [f"Sort must be one of: {', '.join(s.value for s in ReviewSort)}"]

        if min_rating is not None:
            min_rating = _as_int(min_rating, "min_rating", errors)
            if min_rating is not None and not 1 <= min_rating <= 5:
                errors["min_rating"] = ["Minimum rating must be between 1 and 5"]

        if fit:
            try:
                fit = FitFeedback(fit).value
            except ValueError:
                errors["fit"] = [f"Fit must be one of: {', '.join(f.value for f in FitFeedback)}"]
        else:
            fit = None

        if errors:
            raise ValidationError(errors)

        return cls(
            page=max(1, page),
            limit=min(settings.max_page_size, max(1, limit)),
            sort=sort,
            photos_only=bool(photos_only),
            verified_only=bool(verified_only),
            min_rating=min_rating,
            fit=fit,
        )


def _as_int(value, name, errors, default=None):
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        errors[name] = [f"{name} must be an integer"]
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        errors[name] = [f"{name} must be an integer"]
        return default


@dataclass(frozen=True)
class EnrichedReview:
    review: Review
    images: list = field(default_factory=list)
    responses: list = field(default_factory=list)


@dataclass(frozen=True)
class ReviewPage:
    items: list[EnrichedReview]
    page: int
    limit: int
    total: int


def sort_reviews(items, sort: ReviewSort) -> list:
    """`newest`: created_at desc. `helpful`: helpful_count desc, then created_at desc."""
    if sort == ReviewSort.HELPFUL:
        return sorted(items, key=lambda r: (r.helpful_count or 0, r.created_at), reverse=True)
    return sorted(items, key=lambda r: r.created_at, reverse=True)


async def list_reviews(product_id, query: ReviewQuery | None = None) -> ReviewPage:
    if not product_id or not str(product_id).strip():
        raise ValidationError({"product_id": ["A product id is required"]})
    query = query or ReviewQuery.build()
    timeout = get_settings().store_timeout_seconds

    review_repo = current_domain.repository_for(Review)
    image_repo = current_domain.repository_for(ReviewImage)
    response_repo = current_domain.repository_for(ReviewResponse)

    candidates = await read_from_store(
        review_repo.approved_for_product,
        product_id,
        query.verified_only,
        query.min_rating,
        query.fit,
        query.photos_only,
        timeout=timeout,
    )
    ordered = sort_reviews(candidates, query.sort)
    page = ordered[query.offset : query.offset + query.limit]
    page_ids = [str(review.id) for review in page]

    images, responses = {}, {}
    if page_ids:
        images, responses = await asyncio.gather(
            read_from_store(image_repo.for_reviews, page_ids, timeout=timeout),
            read_from_store(response_repo.for_reviews, page_ids, timeout=timeout),
        )

    logger.debug(
        "Listed reviews",
        product_id=str(product_id),
        page=query.page,
        limit=query.limit,
        sort=query.sort.value,
        matched=len(ordered),
        returned=len(page),
    )

    return ReviewPage(
        items=[
            EnrichedReview(
                review=review,
                images=images.get(str(review.id), []),
                responses=responses.get(str(review.id), []),
            )
            for review in page
        ],
        page=query.page,
        limit=query.limit,
        total=len(ordered),
    )


def admin_reviews(page=1, limit=20) -> ReviewPage:
    """Every review, approved or not, newest first. Limit is capped for the admin screen."""
    settings = get_settings()
    query = ReviewQuery.build(page=page, limit=limit)
    limit = min(query.limit, settings.admin_max_page_size)
    offset = (query.page - 1) * limit

    ordered = sort_reviews(current_domain.repository_for(Review).everything(), ReviewSort.NEWEST)
    return ReviewPage(
        items=[EnrichedReview(review=review) for review in ordered[offset : offset + limit]],
        page=query.page,
        limit=limit,
        total=len(ordered),
    )
