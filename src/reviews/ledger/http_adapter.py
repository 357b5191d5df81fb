"""Order ledger backed by the storefront orders API.

Calls ``GET {base_url}/users/{user_id}/orders?product_id=...`` and expects a
JSON body of the form ``{"orders": [{"order_status": ..., "payment_status": ...}]}``.
Every request is bounded by a timeout. A 404 means the customer has no
orders; transport failures, any other non-2xx response and a body of any
other shape surface as OrderLedgerUnavailable. An API key, when configured,
is sent as a bearer token.
"""

import requests
import structlog

from reviews.ledger.port import OrderLedger, OrderLedgerUnavailable, is_qualifying

logger = structlog.get_logger(__name__)


class HttpOrderLedger(OrderLedger):
    def __init__(
        self,
        base_url: str,
        timeout: float = 2.0,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def has_qualifying_order(self, user_id: str, product_id: str) -> bool:
        url = f"{self.base_url}/users/{user_id}/orders"
        try:
            response = self.session.get(url, params={"product_id": str(product_id)}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise OrderLedgerUnavailable(f"Order ledger request failed: {exc}") from exc

        if response.status_code == 404:
            return False
        if not response.ok:
            raise OrderLedgerUnavailable(f"Order ledger returned {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise OrderLedgerUnavailable("Order ledger returned a malformed body") from exc

        orders = (body.get("orders") or []) if isinstance(body, dict) else None
        if not isinstance(orders, list) or not all(isinstance(order, dict) for order in orders):
            raise OrderLedgerUnavailable("Order ledger returned an unexpected body shape")

        logger.debug(
            "Order ledger answered",
            user_id=str(user_id),
            product_id=str(product_id),
            order_count=len(orders),
        )
        return any(is_qualifying(o.get("order_status"), o.get("payment_status")) for o in orders)
