"""
Exception handlers mapping errors to the service's JSON error body: {"error", "code"}.
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from order_service.orders.exceptions import InsufficientStockError, OrderServiceError, UpstreamError
from order_service.shared.logger import JohnWickLogger

logger = JohnWickLogger("ExceptionHandlers")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed body or path parameter: rejected before any order logic runs."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
        },
    )


async def order_service_exception_handler(request: Request, exc: OrderServiceError) -> JSONResponse:
    body = {"error": exc.message, "code": exc.code}

    if isinstance(exc, InsufficientStockError):
        body.update(
            {
                "productId": str(exc.product_id),
                "requested": exc.requested,
                "available": exc.available,
            }
        )
    elif isinstance(exc, UpstreamError):
        body["upstreamStatus"] = exc.status_code

    logger.warning("Request failed", extra={"path": request.url.path, "code": exc.code, "error": exc.message})
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OrderServiceError, order_service_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
