"""Maps unreachable collaborators to 503 responses.

Only the two "did not answer" errors are retryable. Other LookupErrors,
KeyError and IndexError among them, are bugs and stay 500s.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reviews.ledger.port import OrderLedgerUnavailable
from reviews.review.store import ReviewStoreUnavailable

logger = structlog.get_logger(__name__)


async def collaborator_unavailable(request: Request, exc: LookupError) -> JSONResponse:
    logger.warning("Upstream unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"error": str(exc) or "Service unavailable"})


def register_unavailable_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderLedgerUnavailable, collaborator_unavailable)
    app.add_exception_handler(ReviewStoreUnavailable, collaborator_unavailable)
