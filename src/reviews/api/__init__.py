"""Reviews domain API package."""

from reviews.api.errors import register_unavailable_handlers
from reviews.api.middleware import domain_request_middleware
from reviews.api.routes import admin_router, review_router

__all__ = ["review_router", "admin_router", "domain_request_middleware", "register_unavailable_handlers"]
