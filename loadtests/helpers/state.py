"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps the review ids it created so follow-up
votes and listings can reference them. No state is shared across users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """A simulated shopper browsing and reviewing one product."""

    product_id: str
    user_id: str | None = None
    review_ids: list[str] = field(default_factory=list)
    votes_cast: int = 0
