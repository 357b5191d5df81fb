"""Order ledger backed by the PurchasedItems projection."""

from protean.utils.globals import current_domain

from reviews.ledger.port import OrderLedger, OrderLedgerUnavailable, is_qualifying
from reviews.projections.purchased_items import PurchasedItems
from reviews.utils.db import iter_all


class ProjectionOrderLedger(OrderLedger):
    def has_qualifying_order(self, user_id: str, product_id: str) -> bool:
        try:
            repo = current_domain.repository_for(PurchasedItems)
            lines = iter_all(
                repo._dao.query.filter(customer_id=str(user_id), product_id=str(product_id)),
                order_by="line_id",
            )
            return any(is_qualifying(line.order_status, line.payment_status) for line in lines)
        except Exception as exc:
            raise OrderLedgerUnavailable(f"Purchased items lookup failed: {exc}") from exc
