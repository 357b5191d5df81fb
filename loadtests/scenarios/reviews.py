"""Reviews load test scenarios.

ShopperJourney writes a review and then hammers it with votes from a
handful of identities, which exercises vote reconciliation under
concurrency. Browsers only read listings and summaries.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import forwarded_ip, listing_params, product_id, review_data, user_id
from loadtests.helpers.state import ShopperState


class ShopperJourney(SequentialTaskSet):
    """Submit a review -> read the listing -> vote on it repeatedly."""

    def on_start(self):
        self.state = ShopperState(product_id=product_id(), user_id=random.choice([user_id(), None]))

    @task
    def submit_review(self):
        with self.client.post(
            "/reviews",
            json=review_data(self.state.product_id, self.state.user_id),
            catch_response=True,
            name="POST /reviews",
        ) as resp:
            if resp.status_code == 201:
                self.state.review_ids.append(resp.json()["review_id"])
            else:
                resp.failure(f"Submit review failed: {resp.status_code}")
                self.interrupt()

    @task
    def read_listing(self):
        self.client.get(
            f"/reviews/{self.state.product_id}",
            params=listing_params(),
            name="GET /reviews/{product_id}",
        )

    @task
    def vote_repeatedly(self):
        review_id = self.state.review_ids[-1]
        voters = [user_id() for _ in range(2)]
        for _ in range(5):
            voter = random.choice(voters + [None])
            payload = {"review_id": review_id, "is_helpful": random.random() < 0.7}
            headers = {}
            if voter:
                payload["user_id"] = voter
            else:
                headers["X-Forwarded-For"] = forwarded_ip()
            with self.client.post(
                "/reviews/vote",
                json=payload,
                headers=headers,
                catch_response=True,
                name="POST /reviews/vote",
            ) as resp:
                if resp.status_code == 200:
                    self.state.votes_cast += 1
                else:
                    resp.failure(f"Vote failed: {resp.status_code}")

    @task
    def read_summary(self):
        self.client.get(f"/reviews/summary/{self.state.product_id}", name="GET /reviews/summary/{product_id}")
        self.interrupt(reschedule=True)


class ShopperUser(HttpUser):
    tasks = [ShopperJourney]
    wait_time = between(0.5, 2)
    weight = 1


class BrowserUser(HttpUser):
    """Read-heavy traffic against the hot products."""

    wait_time = between(0.2, 1)
    weight = 4

    @task(3)
    def browse_listing(self):
        self.client.get(
            f"/reviews/{product_id()}",
            params=listing_params(),
            name="GET /reviews/{product_id}",
        )

    @task(1)
    def browse_summary(self):
        self.client.get(f"/reviews/summary/{product_id()}", name="GET /reviews/summary/{product_id}")
