"""Per-request wiring shared by every app that mounts the review routers."""

from fastapi import Request

from reviews.domain import reviews
from reviews.utils.logging import REQUEST_ID_HEADER, request_context


async def domain_request_middleware(request: Request, call_next):
    """Run the request inside the reviews domain context and a logging scope."""
    with request_context(
        request.headers.get(REQUEST_ID_HEADER),
        method=request.method,
        path=request.url.path,
    ) as request_id:
        with reviews.domain_context():
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
