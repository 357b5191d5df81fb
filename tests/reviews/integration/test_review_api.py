"""Integration tests for Reviews API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers
from reviews.api import domain_request_middleware, register_unavailable_handlers
from reviews.api.routes import admin_router, get_product_reviews, get_review_summary, review_router
from reviews.ledger.port import OrderLedgerUnavailable
from reviews.review.store import ReviewStoreUnavailable


@pytest.fixture()
def app():
    app = FastAPI()
    app.middleware("http")(domain_request_middleware)
    app.include_router(review_router)
    app.include_router(admin_router)
    register_exception_handlers(app)
    register_unavailable_handlers(app)
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)


def _submit_review(client, **overrides):
    payload = {
        "product_id": "prod-api",
        "user_id": "user-api",
        "rating": 4,
        "body": "This is a review body submitted via the API.",
    }
    payload.update(overrides)
    response = client.post("/reviews", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestSubmitReviewAPI:
    def test_returns_created_review(self, client):
        body = _submit_review(
            client,
            title="Nice",
            fit_feedback="perfect",
            images=["https://cdn.example.com/a.jpg"],
        )
        assert body["review_id"]
        assert body["rating"] == 4
        assert body["fit_feedback"] == "perfect"
        assert body["images"] == [{"url": "https://cdn.example.com/a.jpg", "sort_order": 0}]
        assert body["verified_purchase"] is False

    def test_verified_purchase(self, client, ledger):
        ledger.record_order("user-api", "prod-api", payment_status="paid")
        assert _submit_review(client)["verified_purchase"] is True

    def test_ledger_down_still_accepts_review(self, client, ledger):
        ledger.configure(available=False)
        assert _submit_review(client)["verified_purchase"] is False

    def test_short_body_returns_400(self, client):
        response = client.post(
            "/reviews",
            json={"product_id": "prod-api", "user_id": "user-api", "rating": 4, "body": "meh"},
        )
        assert response.status_code == 400

    def test_rating_out_of_range_returns_400(self, client):
        response = client.post(
            "/reviews",
            json={"product_id": "prod-api", "user_id": "user-api", "rating": 9, "body": "Long enough body text."},
        )
        assert response.status_code == 400


class TestListingAPI:
    def test_lists_with_filters(self, client):
        _submit_review(client, rating=5)
        _submit_review(client, rating=2)

        response = client.get("/reviews/prod-api", params={"min_rating": 4})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert [item["rating"] for item in body["items"]] == [5]
        assert body["page"] == 1

    def test_limit_is_clamped(self, client):
        _submit_review(client)
        assert client.get("/reviews/prod-api", params={"limit": 0}).json()["limit"] == 1

    def test_bad_sort_returns_400(self, client):
        assert client.get("/reviews/prod-api", params={"sort": "random"}).status_code == 400

    def test_store_timeout_returns_503(self, client, monkeypatch):
        async def unavailable(product_id, query=None):
            raise ReviewStoreUnavailable("Review store did not answer within 5.0s")

        monkeypatch.setitem(get_product_reviews.__globals__, "list_reviews", unavailable)
        response = client.get("/reviews/prod-api")
        assert response.status_code == 503
        assert "error" in response.json()


class TestSummaryAPI:
    def test_summary(self, client):
        for rating in (5, 5, 4, 3, 5):
            _submit_review(client, rating=rating)

        body = client.get("/reviews/summary/prod-api").json()

        assert body["total"] == 5
        assert body["average"] == 4.4
        assert body["counts_by_star"] == {"1": 0, "2": 0, "3": 1, "4": 1, "5": 3}

    def test_store_timeout_returns_503(self, client, monkeypatch):
        async def unavailable(product_id):
            raise ReviewStoreUnavailable("Review store did not answer within 5.0s")

        monkeypatch.setitem(get_review_summary.__globals__, "product_summary", unavailable)
        assert client.get("/reviews/summary/prod-api").status_code == 503

    def test_empty_summary(self, client):
        body = client.get("/reviews/summary/prod-nothing").json()
        assert body["total"] == 0
        assert body["average"] == 0
        assert body["verified_count"] == 0


class TestVoteAPI:
    def test_user_vote(self, client):
        review_id = _submit_review(client)["review_id"]
        response = client.post("/reviews/vote", json={"review_id": review_id, "user_id": "voter-1"})
        assert response.status_code == 200
        assert response.json() == {"helpful": 1, "unhelpful": 0}

    def test_anonymous_votes_keyed_by_forwarded_ip(self, client):
        review_id = _submit_review(client)["review_id"]
        client.post(
            "/reviews/vote",
            json={"review_id": review_id, "is_helpful": True},
            headers={"X-Forwarded-For": "::ffff:192.0.2.1, 10.0.0.1"},
        )
        response = client.post(
            "/reviews/vote",
            json={"review_id": review_id, "is_helpful": False},
            headers={"X-Forwarded-For": "192.0.2.1"},
        )
        assert response.json() == {"helpful": 0, "unhelpful": 1}

    def test_socket_peer_used_without_forwarding_header(self, client):
        review_id = _submit_review(client)["review_id"]
        client.post("/reviews/vote", json={"review_id": review_id})
        response = client.post("/reviews/vote", json={"review_id": review_id})
        assert response.json() == {"helpful": 1, "unhelpful": 0}

    def test_unknown_review_returns_404(self, client):
        response = client.post("/reviews/vote", json={"review_id": "nope", "user_id": "voter-1"})
        assert response.status_code == 404


class TestAdminAPI:
    def test_hide_and_list(self, client):
        review_id = _submit_review(client)["review_id"]

        response = client.patch(f"/admin/reviews/{review_id}/approval", json={"is_approved": False})
        assert response.status_code == 200
        assert response.json()["is_approved"] is False

        assert client.get("/reviews/prod-api").json()["total"] == 0
        admin = client.get("/admin/reviews").json()
        assert [item["review_id"] for item in admin["items"]] == [review_id]

    def test_respond(self, client):
        review_id = _submit_review(client)["review_id"]

        response = client.post(f"/admin/reviews/{review_id}/respond", json={"body": "Thanks for the feedback!"})
        assert response.status_code == 201
        assert response.json()["response_id"]

        [item] = client.get("/reviews/prod-api").json()["items"]
        assert item["responses"][0]["body"] == "Thanks for the feedback!"

    def test_respond_to_unknown_review_returns_404(self, client):
        response = client.post("/admin/reviews/nope/respond", json={"body": "Hello there"})
        assert response.status_code == 404


class TestRequestWiring:
    def test_request_id_is_echoed(self, client):
        response = client.get("/reviews/summary/prod-api", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        assert client.get("/reviews/summary/prod-api").headers["X-Request-ID"]

    def test_ledger_unavailable_returns_503(self, app):
        @app.get("/ledger-down")
        async def ledger_down():
            raise OrderLedgerUnavailable("Order ledger returned 502")

        response = TestClient(app).get("/ledger-down")

        assert response.status_code == 503
        assert response.json() == {"error": "Order ledger returned 502"}

    @pytest.mark.parametrize("error", [KeyError("review_id"), IndexError("list index out of range")])
    def test_other_lookup_errors_are_server_errors(self, app, error):
        @app.get("/broken")
        async def broken():
            raise error

        response = TestClient(app, raise_server_exceptions=False).get("/broken")

        assert response.status_code == 500
