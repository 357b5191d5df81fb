"""Order ledger factory.

Provides get_order_ledger() / set_order_ledger() to swap implementations:
- HttpOrderLedger when ORDER_LEDGER_URL is configured
- ProjectionOrderLedger otherwise (reads Ordering events replicated locally)
- FakeOrderLedger for tests, installed with set_order_ledger()
"""

from reviews.config import get_settings
from reviews.ledger.http_adapter import HttpOrderLedger
from reviews.ledger.port import OrderLedger
from reviews.ledger.projection_adapter import ProjectionOrderLedger

_current_ledger: OrderLedger | None = None


def get_order_ledger() -> OrderLedger:
    """Return the active order ledger, building the configured default on first use."""
    global _current_ledger
    if _current_ledger is None:
        settings = get_settings()
        if settings.order_ledger_url:
            _current_ledger = HttpOrderLedger(
                settings.order_ledger_url,
                timeout=settings.order_ledger_timeout_seconds,
                api_key=settings.order_ledger_api_key,
            )
        else:
            _current_ledger = ProjectionOrderLedger()
    return _current_ledger


def set_order_ledger(ledger: OrderLedger) -> None:
    global _current_ledger
    _current_ledger = ledger


def reset_order_ledger() -> None:
    global _current_ledger
    _current_ledger = None
