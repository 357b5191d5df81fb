"""Inbound cross-domain event handler: Reviews reacts to Ordering events.

Keeps the PurchasedItems projection current so the ProjectionOrderLedger
can answer "did this customer order this product" locally. Each ordered
product becomes one line; later events move the line's order and payment
status forward.

Cross-domain events are imported from shared.events.ordering and registered
as external events via reviews.register_external_event().
"""

import json
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.ordering import (
    OrderCancelled,
    OrderCreated,
    OrderDelivered,
    OrderPaid,
)

from reviews.domain import reviews
from reviews.ledger.port import CANCELLED, PAID
from reviews.projections.purchased_items import PurchasedItems, line_id_for
from reviews.review.review import Review
from reviews.utils.db import iter_all

logger = structlog.get_logger(__name__)

PENDING = "pending"
PROCESSING = "processing"
DELIVERED = "delivered"

# Register external events so Protean can deserialize them
reviews.register_external_event(OrderCreated, "Ordering.OrderCreated.v1")
reviews.register_external_event(OrderPaid, "Ordering.OrderPaid.v1")
reviews.register_external_event(OrderCancelled, "Ordering.OrderCancelled.v1")
reviews.register_external_event(OrderDelivered, "Ordering.OrderDelivered.v1")


def _product_ids(items) -> list[str]:
    if not items:
        return []
    try:
        parsed = json.loads(items) if isinstance(items, str) else items
    except ValueError:
        logger.warning("Order items payload is not valid JSON", items=str(items)[:200])
        return []
    product_ids = []
    for item in parsed or []:
        product_id = item.get("product_id") if isinstance(item, dict) else None
        if product_id and str(product_id) not in product_ids:
            product_ids.append(str(product_id))
    return product_ids


def _advance(line, order_status) -> bool:
    # A cancelled order stays cancelled even if later events arrive
    if line.order_status == CANCELLED or line.order_status == order_status:
        return False
    line.order_status = order_status
    return True


def _upsert_lines(order_id, customer_id, items, order_status=None, payment_status=None):
    repo = current_domain.repository_for(PurchasedItems)
    now = datetime.now(UTC)

    for product_id in _product_ids(items):
        line_id = line_id_for(order_id, product_id)
        try:
            line = repo.get(line_id)
        except ObjectNotFoundError:
            line = PurchasedItems(
                line_id=line_id,
                order_id=str(order_id),
                customer_id=str(customer_id),
                product_id=product_id,
                order_status=order_status or PENDING,
                payment_status=payment_status or PENDING,
                updated_at=now,
            )
        else:
            if order_status:
                _advance(line, order_status)
            if payment_status:
                line.payment_status = payment_status
            line.updated_at = now
        repo.add(line)


def _update_order(order_id, order_status) -> int:
    repo = current_domain.repository_for(PurchasedItems)
    now = datetime.now(UTC)

    updated = 0
    for line in list(iter_all(repo._dao.query.filter(order_id=str(order_id)), order_by="line_id")):
        if _advance(line, order_status):
            line.updated_at = now
            repo.add(line)
            updated += 1
    return updated


@reviews.event_handler(part_of=Review, stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to track which customers bought what."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        _upsert_lines(event.order_id, event.customer_id, event.items, order_status=PENDING)

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        _upsert_lines(
            event.order_id,
            event.customer_id,
            event.items,
            order_status=PROCESSING,
            payment_status=PAID,
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        updated = _update_order(event.order_id, CANCELLED)
        logger.info("Order lines cancelled", order_id=str(event.order_id), lines=updated)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        if event.customer_id and event.items:
            _upsert_lines(event.order_id, event.customer_id, event.items, order_status=DELIVERED)
        else:
            _update_order(event.order_id, DELIVERED)
