"""Storefront HTTP API package."""

from storefront.api.errors import register_exception_handlers
from storefront.api.routes import campaign_router, customer_router, order_router, product_router, session_router

routers = [product_router, session_router, order_router, customer_router, campaign_router]

__all__ = [
    "campaign_router",
    "customer_router",
    "order_router",
    "product_router",
    "register_exception_handlers",
    "routers",
    "session_router",
]
