"""Map storefront errors onto HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from storefront.shared.exceptions import (
    ConcurrencyHazard,
    InvalidTransition,
    LoyaltyAwardError,
    NetworkError,
    NotFound,
    OutOfStock,
    ValidationError,
)

logger = structlog.get_logger(__name__)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def _model_validation_error(request: Request, exc: PydanticValidationError) -> JSONResponse:
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__all__"
        messages.setdefault(field, []).append(error["msg"])
    return JSONResponse(status_code=400, content={"error": messages})


async def _out_of_stock(request: Request, exc: OutOfStock) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": exc.messages,
            "product_id": exc.product_id,
            "requested": exc.requested,
            "available": exc.available,
        },
    )


async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _invalid_transition(request: Request, exc: InvalidTransition) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": str(exc), "current": exc.current, "requested": exc.requested},
    )


async def _concurrency_hazard(request: Request, exc: ConcurrencyHazard) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": str(exc), "retryable": True})


async def _network_error(request: Request, exc: NetworkError) -> JSONResponse:
    logger.error("Resource store unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"error": str(exc), "retryable": True})


async def _loyalty_award_error(request: Request, exc: LoyaltyAwardError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={
            "error": str(exc),
            "order_id": exc.order_id,
            "status_persisted": True,
            "retry": f"/orders/{exc.order_id}/loyalty-award",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(OutOfStock, _out_of_stock)
    app.add_exception_handler(PydanticValidationError, _model_validation_error)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(ConcurrencyHazard, _concurrency_hazard)
    app.add_exception_handler(NetworkError, _network_error)
    app.add_exception_handler(LoyaltyAwardError, _loyalty_award_error)
