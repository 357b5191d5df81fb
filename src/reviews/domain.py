"""Reviews & Ratings bounded context: product reviews for the Calista storefront.

Handles review submission with verified-purchase attribution, helpfulness
voting, rating summaries and review listings. Integrates with the Ordering
domain through cross-domain events that feed the order ledger projection.
"""

from protean.domain import Domain

from reviews.utils.logging import configure_logging

configure_logging()

reviews = Domain(name="reviews")
