"""FastAPI routes for the Reviews & Ratings bounded context.

Each route translates between Pydantic schemas (external contract) and
Protean commands or read operations (internal domain concepts).
"""

import json

from fastapi import APIRouter, Request
from protean.utils.globals import current_domain

from reviews.api.schemas import (
    ResponseIdOut,
    ReviewApprovalRequest,
    ReviewImageOut,
    ReviewOut,
    ReviewPageOut,
    ReviewResponseOut,
    ReviewSummaryOut,
    RespondToReviewRequest,
    SubmitReviewRequest,
    VoteOnReviewRequest,
    VoteTallyOut,
)
from reviews.review.attachments import ReviewImage
from reviews.review.listing import ReviewQuery, admin_reviews, list_reviews
from reviews.review.moderation import SetReviewApproval
from reviews.review.reply import RespondToReview
from reviews.review.review import Review
from reviews.review.submission import SubmitReview
from reviews.review.summary import product_summary
from reviews.review.voting import cast_vote
from reviews.utils.logging import bind_review_context

review_router = APIRouter(prefix="/reviews", tags=["reviews"])
admin_router = APIRouter(prefix="/admin/reviews", tags=["admin"])


def client_ip(request: Request) -> str | None:
    """First hop of X-Forwarded-For, falling back to the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


def _review_out(review, images=(), responses=()) -> ReviewOut:
    return ReviewOut(
        review_id=str(review.id),
        product_id=str(review.product_id),
        user_id=str(review.user_id) if review.user_id else None,
        reviewer_name=review.reviewer_name,
        rating=review.rating,
        title=review.title,
        body=review.body,
        quality_rating=review.quality_rating,
        comfort_rating=review.comfort_rating,
        style_rating=review.style_rating,
        size_purchased=review.size_purchased,
        color_purchased=review.color_purchased,
        fit_feedback=review.fit_feedback,
        verified_purchase=bool(review.verified_purchase),
        is_approved=bool(review.is_approved),
        helpful_count=review.helpful_count or 0,
        unhelpful_count=review.unhelpful_count or 0,
        created_at=review.created_at,
        images=[ReviewImageOut(url=image.url, sort_order=image.sort_order or 0) for image in images],
        responses=[
            ReviewResponseOut(
                responder_name=response.responder_name,
                body=response.body,
                created_at=response.created_at,
            )
            for response in responses
        ],
    )


def _page_out(page) -> ReviewPageOut:
    return ReviewPageOut(
        items=[_review_out(item.review, item.images, item.responses) for item in page.items],
        page=page.page,
        limit=page.limit,
        total=page.total,
    )


# ---------------------------------------------------------------------------
# Storefront
# ---------------------------------------------------------------------------
@review_router.get("/summary/{product_id}", response_model=ReviewSummaryOut)
async def get_review_summary(product_id: str) -> ReviewSummaryOut:
    """Rating distribution and averages over a product's approved reviews."""
    bind_review_context(product_id=product_id)
    summary = await product_summary(product_id)
    return ReviewSummaryOut(**summary.to_dict())


@review_router.get("/{product_id}", response_model=ReviewPageOut)
async def get_product_reviews(
    product_id: str,
    page: int = 1,
    limit: int | None = None,
    sort: str = "newest",
    photos_only: bool = False,
    verified_only: bool = False,
    min_rating: int | None = None,
    fit: str | None = None,
) -> ReviewPageOut:
    """A page of a product's approved reviews with their images and responses."""
    bind_review_context(product_id=product_id)
    query = ReviewQuery.build(
        page=page,
        limit=limit,
        sort=sort,
        photos_only=photos_only,
        verified_only=verified_only,
        min_rating=min_rating,
        fit=fit,
    )
    return _page_out(await list_reviews(product_id, query))


@review_router.post("", status_code=201, response_model=ReviewOut)
async def submit_review(body: SubmitReviewRequest) -> ReviewOut:
    """Submit a new product review."""
    bind_review_context(product_id=body.product_id)
    command = SubmitReview(
        product_id=body.product_id,
        user_id=body.user_id,
        reviewer_name=body.reviewer_name,
        reviewer_email=body.reviewer_email,
        rating=body.rating,
        title=body.title,
        body=body.body,
        quality_rating=body.quality_rating,
        comfort_rating=body.comfort_rating,
        style_rating=body.style_rating,
        size_purchased=body.size_purchased,
        color_purchased=body.color_purchased,
        fit_feedback=body.fit_feedback,
        image_urls=json.dumps(body.images) if body.images else None,
    )
    review_id = current_domain.process(command, asynchronous=False)
    bind_review_context(review_id=review_id)

    review = current_domain.repository_for(Review).get(review_id)
    images = current_domain.repository_for(ReviewImage).for_reviews([review_id])
    return _review_out(review, images.get(review_id, []))


@review_router.post("/vote", response_model=VoteTallyOut)
async def vote_on_review(body: VoteOnReviewRequest, request: Request) -> VoteTallyOut:
    """Mark a review helpful or unhelpful. A repeat vote replaces the earlier one."""
    bind_review_context(review_id=body.review_id)
    tally = cast_vote(
        body.review_id,
        is_helpful=body.is_helpful,
        user_id=body.user_id,
        client_ip=None if body.user_id else client_ip(request),
    )
    return VoteTallyOut(**tally)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
@admin_router.get("", response_model=ReviewPageOut)
async def list_all_reviews(page: int = 1, limit: int = 20) -> ReviewPageOut:
    """Every review, approved or hidden, newest first."""
    return _page_out(admin_reviews(page=page, limit=limit))


@admin_router.patch("/{review_id}/approval", response_model=ReviewOut)
async def set_review_approval(review_id: str, body: ReviewApprovalRequest) -> ReviewOut:
    """Publish or hide a review."""
    bind_review_context(review_id=review_id)
    current_domain.process(
        SetReviewApproval(review_id=review_id, is_approved=body.is_approved),
        asynchronous=False,
    )
    return _review_out(current_domain.repository_for(Review).get(review_id))


@admin_router.post("/{review_id}/respond", status_code=201, response_model=ResponseIdOut)
async def respond_to_review(review_id: str, body: RespondToReviewRequest) -> ResponseIdOut:
    """Post an official response under a review."""
    bind_review_context(review_id=review_id)
    command = RespondToReview(
        review_id=review_id,
        body=body.body,
        responder_name=body.responder_name,
    )
    response_id = current_domain.process(command, asynchronous=False)
    return ResponseIdOut(response_id=response_id)
