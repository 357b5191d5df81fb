"""Verified-purchase attribution for new reviews.

Resolution fails open: if the order ledger cannot answer, the review is
recorded as unverified instead of being rejected.
"""

import structlog

from reviews.ledger.port import OrderLedger

logger = structlog.get_logger(__name__)


class VerifiedPurchaseResolver:
    def __init__(self, ledger: OrderLedger) -> None:
        self.ledger = ledger

    def resolve(self, user_id, product_id) -> bool:
        """True when the registered user holds a qualifying order for the product.

        Guests are never verified and never reach the ledger.
        """
        if not user_id:
            return False

        try:
            return bool(self.ledger.has_qualifying_order(str(user_id), str(product_id)))
        except LookupError as exc:
            logger.warning(
                "Order ledger unavailable, recording review as unverified",
                user_id=str(user_id),
                product_id=str(product_id),
                error=str(exc),
            )
            return False
