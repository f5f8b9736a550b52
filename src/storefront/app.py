"""Storefront FastAPI application.

Usage:
    uvicorn storefront.app:create_app --factory --host 0.0.0.0 --port 8000 --reload
    python -m storefront.manage serve

STOREFRONT_ENV selects the config overlay (``production`` talks to the REST
resource store; ``development`` keeps everything in memory).
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.utils.logging import add_context, clear_context

from storefront import __version__
from storefront.api import register_exception_handlers, routers
from storefront.config import current_env
from storefront.container import Storefront, get_storefront
from storefront.domain import init_domain


def create_app(storefront: Storefront | None = None) -> FastAPI:
    domain = init_domain()
    app = FastAPI(
        title="Storefront API",
        description="Orders, fulfillment tracking, loyalty points and campaign ROI",
        version=__version__,
    )
    app.state.storefront = storefront or get_storefront()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Push the storefront domain context and bind a request id to every log line."""
        clear_context()
        add_context(request_id=request.headers.get("x-request-id", uuid4().hex), path=request.url.path)
        with domain.domain_context():
            response = await call_next(request)
        return response

    for router in routers:
        app.include_router(router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        sf: Storefront = app.state.storefront
        return JSONResponse(
            content={
                "status": "ok",
                "environment": current_env(),
                "store": type(sf.store).__name__,
                "pickup_locations": len(sf.settings.pickup_locations),
            }
        )

    return app
