"""PurchasedItems: one row per (order, product) with the order's current status.

Populated by the Ordering cross-domain event handler and read by the
ProjectionOrderLedger to attribute verified purchases.
"""

from protean.fields import DateTime, Identifier, String

from reviews.domain import reviews


@reviews.projection
class PurchasedItems:
    line_id = Identifier(identifier=True, required=True)
    order_id = String(required=True)
    customer_id = String(required=True)
    product_id = String(required=True)
    order_status = String(required=True, max_length=50)
    payment_status = String(required=True, max_length=50)
    updated_at = DateTime()


def line_id_for(order_id, product_id) -> str:
    return f"{order_id}:{product_id}"
