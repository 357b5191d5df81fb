"""Pydantic request/response schemas for the Reviews API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    product_id: str
    rating: int
    body: str
    user_id: str | None = None
    reviewer_name: str | None = None
    reviewer_email: str | None = None
    title: str | None = None
    quality_rating: int | None = None
    comfort_rating: int | None = None
    style_rating: int | None = None
    size_purchased: str | None = None
    color_purchased: str | None = None
    fit_feedback: str | None = None
    images: list[str] | None = None


class VoteOnReviewRequest(BaseModel):
    review_id: str
    is_helpful: bool = True
    user_id: str | None = None


class ReviewApprovalRequest(BaseModel):
    is_approved: bool


class RespondToReviewRequest(BaseModel):
    body: str
    responder_name: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewImageOut(BaseModel):
    url: str
    sort_order: int = 0


class ReviewResponseOut(BaseModel):
    responder_name: str
    body: str
    created_at: datetime | None = None


class ReviewOut(BaseModel):
    review_id: str
    product_id: str
    user_id: str | None = None
    reviewer_name: str | None = None
    rating: int
    title: str | None = None
    body: str
    quality_rating: int | None = None
    comfort_rating: int | None = None
    style_rating: int | None = None
    size_purchased: str | None = None
    color_purchased: str | None = None
    fit_feedback: str | None = None
    verified_purchase: bool = False
    is_approved: bool = True
    helpful_count: int = 0
    unhelpful_count: int = 0
    created_at: datetime | None = None
    images: list[ReviewImageOut] = Field(default_factory=list)
    responses: list[ReviewResponseOut] = Field(default_factory=list)


class ReviewPageOut(BaseModel):
    items: list[ReviewOut]
    page: int
    limit: int
    total: int


class ReviewSummaryOut(BaseModel):
    total: int
    average: float
    counts_by_star: dict[int, int]
    verified_count: int
    average_quality: float
    average_comfort: float
    average_style: float
    fit_feedback_counts: dict[str, int]


class VoteTallyOut(BaseModel):
    helpful: int
    unhelpful: int


class ResponseIdOut(BaseModel):
    response_id: str
