"""Application tests for review listing and enrichment."""

import asyncio
import json
import time
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from reviews.review.attachments import ReviewImage, ReviewResponse
from reviews.review.listing import ReviewQuery, admin_reviews, list_reviews
from reviews.review.review import Review
from reviews.review.store import ReviewStoreUnavailable
from reviews.review.submission import SubmitReview

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _add_review(
    product_id="prod-list",
    rating=5,
    verified=False,
    minutes_ago=0,
    helpful=0,
    image_count=0,
    approved=True,
    fit=None,
):
    review = Review.submit(
        product_id=product_id,
        user_id="user-list",
        rating=rating,
        body="Comfortable and arrived quickly, would buy again.",
        image_count=image_count,
        verified_purchase=verified,
        is_approved=approved,
        fit_feedback=fit,
    )
    review.created_at = BASE_TIME - timedelta(minutes=minutes_ago)
    review.helpful_count = helpful
    current_domain.repository_for(Review).add(review)
    return str(review.id)


def _list(product_id="prod-list", **params):
    return asyncio.run(list_reviews(product_id, ReviewQuery.build(**params)))


def _ids(page):
    return [str(item.review.id) for item in page.items]


class TestFilters:
    def test_verified_only_and_min_rating(self):
        verified_five_a = _add_review(rating=5, verified=True, minutes_ago=1)
        verified_five_b = _add_review(rating=5, verified=True, minutes_ago=2)
        _add_review(rating=3, verified=True, minutes_ago=3)
        _add_review(rating=5, verified=False, minutes_ago=4)

        page = _list(verified_only=True, min_rating=4)

        assert _ids(page) == [verified_five_a, verified_five_b]
        assert page.total == 2

    def test_hidden_reviews_excluded(self):
        visible = _add_review()
        _add_review(approved=False)
        assert _ids(_list()) == [visible]

    def test_other_products_excluded(self):
        mine = _add_review()
        _add_review(product_id="prod-elsewhere")
        assert _ids(_list()) == [mine]

    def test_fit_filter(self):
        perfect = _add_review(fit="perfect")
        _add_review(fit="too_small")
        _add_review()
        assert _ids(_list(fit="perfect")) == [perfect]

    def test_photos_only_filters_before_pagination(self):
        with_photos = [_add_review(image_count=1, minutes_ago=m) for m in (1, 3, 5)]
        for minutes in (0, 2, 4, 6):
            _add_review(minutes_ago=minutes)

        first = _list(photos_only=True, limit=2, page=1)
        second = _list(photos_only=True, limit=2, page=2)

        assert _ids(first) == with_photos[:2]
        assert _ids(second) == with_photos[2:]
        assert first.total == 3

    def test_unknown_product_is_empty(self):
        page = _list(product_id="prod-none")
        assert page.items == []
        assert page.total == 0

    def test_blank_product_rejected(self):
        with pytest.raises(ValidationError):
            asyncio.run(list_reviews("  "))


class TestSortingAndPaging:
    def test_newest_first_by_default(self):
        old = _add_review(minutes_ago=60)
        new = _add_review(minutes_ago=1)
        assert _ids(_list()) == [new, old]

    def test_helpful_sort_breaks_ties_by_recency(self):
        three = _add_review(helpful=3, minutes_ago=1)
        seven_old = _add_review(helpful=7, minutes_ago=30)
        seven_new = _add_review(helpful=7, minutes_ago=10)
        one = _add_review(helpful=1, minutes_ago=0)

        assert _ids(_list(sort="helpful")) == [seven_new, seven_old, three, one]

    def test_pages_partition_the_result(self):
        ids = [_add_review(minutes_ago=m) for m in range(5)]
        pages = [_list(limit=2, page=p) for p in (1, 2, 3)]

        assert [_ids(p) for p in pages] == [ids[0:2], ids[2:4], ids[4:5]]
        assert all(p.total == 5 for p in pages)

    def test_page_past_the_end_is_empty(self):
        _add_review()
        page = _list(page=9)
        assert page.items == []
        assert page.total == 1


class TestEnrichment:
    def test_images_and_responses_attached_in_order(self):
        review_id = current_domain.process(
            SubmitReview(
                product_id="prod-list",
                user_id="user-list",
                rating=5,
                body="Exactly as pictured and the fabric is soft.",
                image_urls=json.dumps(["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]),
            ),
            asynchronous=False,
        )
        responses = current_domain.repository_for(ReviewResponse)
        first = ReviewResponse.compose(review_id, "Calista Team", "Thank you!")
        first.created_at = BASE_TIME
        second = ReviewResponse.compose(review_id, "Calista Team", "Glad it fits.")
        second.created_at = BASE_TIME + timedelta(minutes=5)
        responses.add(second)
        responses.add(first)

        item = _list(photos_only=True).items[0]

        assert [image.url for image in item.images] == [
            "https://cdn.example.com/1.jpg",
            "https://cdn.example.com/2.jpg",
        ]
        assert [response.body for response in item.responses] == ["Thank you!", "Glad it fits."]

    def test_review_without_attachments_gets_empty_lists(self):
        _add_review()
        item = _list().items[0]
        assert item.images == []
        assert item.responses == []

    def test_attachments_of_other_reviews_not_leaked(self):
        _add_review(minutes_ago=0)
        other = _add_review(product_id="prod-elsewhere")
        current_domain.repository_for(ReviewImage).add(
            ReviewImage(review_id=other, url="https://cdn.example.com/x.jpg", sort_order=0)
        )
        assert _list().items[0].images == []

    def test_slow_store_surfaces_as_unavailable(self, monkeypatch):
        monkeypatch.setenv("REVIEWS_STORE_TIMEOUT_SECONDS", "0.01")
        _add_review()
        repo = current_domain.repository_for(Review)

        def stalled(*args, **kwargs):
            time.sleep(0.5)
            return []

        monkeypatch.setattr(type(repo), "approved_for_product", stalled)
        with pytest.raises(ReviewStoreUnavailable):
            _list()


class TestAdminListing:
    def test_includes_hidden_reviews_newest_first(self):
        hidden = _add_review(approved=False, minutes_ago=1)
        shown = _add_review(minutes_ago=5)
        page = admin_reviews()
        assert _ids(page) == [hidden, shown]
        assert page.total == 2

    def test_limit_capped(self):
        _add_review()
        assert admin_reviews(limit=500).limit == 100
