"""Cross-domain event contracts for Ordering events consumed by Reviews.

Reviews keeps a local record of which customer ordered which product, and
the order's current status, so it can attribute verified purchases without
calling the storefront. These classes define the event shape; they are
registered as external events via domain.register_external_event() with
matching __type__ strings so Protean's stream deserialization works.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class OrderCreated(BaseEvent):
    """A new order was placed. Payment has not been captured yet."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {product_id, quantity, ...}
    grand_total = Float(required=True)
    currency = String(default="USD")
    created_at = DateTime(required=True)


class OrderPaid(BaseEvent):
    """Payment was captured for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)
    grand_total = Float(required=True)
    currency = String(default="USD")
    paid_at = DateTime(required=True)


class OrderCancelled(BaseEvent):
    """An order was cancelled. Carries no items; applies to every line of the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    cancelled_by = String()
    cancelled_at = DateTime(required=True)


class OrderDelivered(BaseEvent):
    """An order was delivered to the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    items = Text()  # JSON list of {product_id, ...}
    delivered_at = DateTime(required=True)
