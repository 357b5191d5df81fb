"""Configurable in-memory order ledger for development and testing.

Orders are recorded directly on the instance. The ledger can be switched
to "unavailable" at runtime to exercise the fail-open path of verified
purchase resolution.
"""

from reviews.ledger.port import OrderLedger, OrderLedgerUnavailable, is_qualifying


class FakeOrderLedger(OrderLedger):
    def __init__(self) -> None:
        self.available: bool = True
        self.failure_reason: str = "Order ledger unreachable"
        self.orders: list[dict] = []
        self.calls: list[dict] = []

    def configure(self, available: bool, failure_reason: str = "Order ledger unreachable") -> None:
        self.available = available
        self.failure_reason = failure_reason

    def record_order(
        self,
        user_id: str,
        product_id: str,
        order_status: str = "pending",
        payment_status: str = "pending",
    ) -> None:
        self.orders.append(
            {
                "user_id": str(user_id),
                "product_id": str(product_id),
                "order_status": order_status,
                "payment_status": payment_status,
            }
        )

    def has_qualifying_order(self, user_id: str, product_id: str) -> bool:
        self.calls.append({"user_id": str(user_id), "product_id": str(product_id)})

        if not self.available:
            raise OrderLedgerUnavailable(self.failure_reason)

        return any(
            order["user_id"] == str(user_id)
            and order["product_id"] == str(product_id)
            and is_qualifying(order["order_status"], order["payment_status"])
            for order in self.orders
        )
