"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the review submission rules
(body of at least 10 characters, guest name and plausible email, at most
four images) and match the field names of the API's request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

FITS = ["too_small", "perfect", "too_large"]

# A small catalogue keeps many users writing to the same products.
HOT_PRODUCTS = [f"prod-lt-{n:03d}" for n in range(20)]


def product_id() -> str:
    return random.choice(HOT_PRODUCTS)


def user_id() -> str:
    return f"user-lt-{uuid.uuid4().hex[:8]}"


def guest_email() -> str:
    local = fake.user_name()[:20]
    return f"{local}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}"


def forwarded_ip() -> str:
    """A documentation-range address, sometimes IPv4-mapped."""
    address = f"198.51.100.{random.randint(1, 254)}"
    return f"::ffff:{address}" if random.random() < 0.3 else address


def review_data(product: str, user: str | None = None) -> dict:
    payload = {
        "product_id": product,
        "rating": random.choices([1, 2, 3, 4, 5], weights=[1, 1, 2, 4, 6])[0],
        "title": fake.sentence(nb_words=4)[:200],
        "body": fake.paragraph(nb_sentences=3),
        "quality_rating": random.randint(1, 5),
        "comfort_rating": random.choice([None, random.randint(1, 5)]),
        "fit_feedback": random.choice(FITS + [None]),
        "images": [f"https://cdn.example.com/lt/{uuid.uuid4().hex}.jpg" for _ in range(random.randint(0, 4))],
    }
    if user:
        payload["user_id"] = user
    else:
        payload["reviewer_name"] = fake.first_name()
        payload["reviewer_email"] = guest_email()
    return payload


def listing_params() -> dict:
    params = {
        "page": random.randint(1, 3),
        "limit": random.choice([10, 20]),
        "sort": random.choice(["newest", "helpful"]),
    }
    if random.random() < 0.3:
        params["photos_only"] = "true"
    if random.random() < 0.3:
        params["verified_only"] = "true"
    if random.random() < 0.2:
        params["min_rating"] = random.randint(3, 5)
    return params
