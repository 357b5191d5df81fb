"""Order ledger port (abstract interface).

The Reviews domain never owns orders. It asks an order ledger whether a
customer holds a qualifying order for a product, and uses the answer to flag
a review as a verified purchase. Adapters:

- ProjectionOrderLedger reads the PurchasedItem projection fed by Ordering events
- HttpOrderLedger asks the storefront orders API
- FakeOrderLedger for development and tests
"""

from abc import ABC, abstractmethod

PAID = "paid"
CANCELLED = "cancelled"


class OrderLedgerUnavailable(LookupError):
    """The ledger could not be reached or did not answer in time."""


def is_qualifying(order_status: str | None, payment_status: str | None) -> bool:
    """An order qualifies when it is paid, or when it has not been cancelled."""
    if (payment_status or "").lower() == PAID:
        return True
    return bool(order_status) and order_status.lower() != CANCELLED


class OrderLedger(ABC):
    """Abstract read-only view over a customer's orders."""

    @abstractmethod
    def has_qualifying_order(self, user_id: str, product_id: str) -> bool:
        """True when `user_id` has at least one qualifying order containing `product_id`.

        Absence of orders is `False`, never an error. Raises
        OrderLedgerUnavailable when the ledger cannot answer.
        """
        ...
