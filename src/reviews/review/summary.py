"""Rating summary for a product.

`summarize` is a pure function of the reviews handed to it: it filters to
approved reviews and derives every statistic from that one set, so calling
it twice on the same input always yields the same summary. Records with a
rating outside 1–5 are excluded from all statistics and logged, because a
reporting path should degrade rather than fail on bad legacy rows.
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from reviews.config import get_settings
from reviews.review.review import Review
from reviews.review.store import read_from_store

logger = structlog.get_logger(__name__)

STARS = (1, 2, 3, 4, 5)
_CENTS = Decimal("0.01")


def _empty_star_counts() -> dict[int, int]:
    return {star: 0 for star in STARS}


@dataclass(frozen=True)
class ReviewSummary:
    total: int = 0
    average: float = 0.0
    counts_by_star: dict[int, int] = field(default_factory=_empty_star_counts)
    verified_count: int = 0
    average_quality: float = 0.0
    average_comfort: float = 0.0
    average_style: float = 0.0
    fit_feedback_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "average": self.average,
            "counts_by_star": dict(self.counts_by_star),
            "verified_count": self.verified_count,
            "average_quality": self.average_quality,
            "average_comfort": self.average_comfort,
            "average_style": self.average_style,
            "fit_feedback_counts": dict(self.fit_feedback_counts),
        }


def round_half_up(numerator, denominator) -> float:
    """numerator / denominator to 2 places, halves rounded away from zero. 0 when empty."""
    if not denominator:
        return 0.0
    return float((Decimal(numerator) / Decimal(denominator)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def _valid_star(value) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        star = int(value)
    except (TypeError, ValueError):
        return None
    if star != value or star not in STARS:
        return None
    return star


def _mean(values) -> float:
    values = [v for v in values if v is not None]
    return round_half_up(sum(values), len(values))


def summarize(reviews) -> ReviewSummary:
    approved = [r for r in reviews if getattr(r, "is_approved", False)]

    counted = []
    for review in approved:
        star = _valid_star(review.rating)
        if star is None:
            logger.warning(
                "Out-of-range rating excluded from summary",
                review_id=str(getattr(review, "id", "")),
                product_id=str(getattr(review, "product_id", "")),
                rating=review.rating,
            )
            continue
        counted.append((star, review))

    if not counted:
        return ReviewSummary()

    counts_by_star = _empty_star_counts()
    for star, _ in counted:
        counts_by_star[star] += 1

    fit_counts = Counter(r.fit_feedback for _, r in counted if getattr(r, "fit_feedback", None))

    return ReviewSummary(
        total=len(counted),
        average=round_half_up(sum(star for star, _ in counted), len(counted)),
        counts_by_star=counts_by_star,
        verified_count=sum(1 for _, r in counted if getattr(r, "verified_purchase", False)),
        average_quality=_mean(getattr(r, "quality_rating", None) for _, r in counted),
        average_comfort=_mean(getattr(r, "comfort_rating", None) for _, r in counted),
        average_style=_mean(getattr(r, "style_rating", None) for _, r in counted),
        fit_feedback_counts=dict(fit_counts),
    )


async def product_summary(product_id) -> ReviewSummary:
    """Load the approved reviews of `product_id` once, within the store timeout, and summarize them."""
    if not product_id or not str(product_id).strip():
        raise ValidationError({"product_id": ["A product id is required"]})

    approved = await read_from_store(
        current_domain.repository_for(Review).approved_for_product,
        product_id,
        timeout=get_settings().store_timeout_seconds,
    )
    return summarize(approved)
