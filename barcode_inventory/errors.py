"""Domain exceptions and the uniform error envelope."""

from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging import get_logger

log = get_logger("barcode_inventory.errors")


class InventoryError(Exception):
    """Base error; subclasses fix the machine code and HTTP status."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProductNotFound(InventoryError):
    code = "PRODUCT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, barcode: str):
        super().__init__(f"Product not found: {barcode}")
        self.barcode = barcode


class ProductExists(InventoryError):
    code = "PRODUCT_EXISTS"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, barcode: str):
        super().__init__(f"Product already exists: {barcode}")
        self.barcode = barcode


class ValidationFailed(InventoryError):
    code = "VALIDATION_ERROR"
    status_code = 422


class CategoryReserved(InventoryError):
    code = "CATEGORY_RESERVED"
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamUnavailable(InventoryError):
    code = "UPSTREAM_UNAVAILABLE"
    status_code = status.HTTP_502_BAD_GATEWAY


def error_body(code: str, message: str, status_code: int) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message, "status": status_code}}


async def _inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        log.info(f"{request.method} {request.url.path} -> {exc.code}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.status_code),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # first problem is enough for an inline message
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        message = f"{loc}: {errors[0].get('msg')}" if loc else str(errors[0].get("msg"))
    return JSONResponse(
        status_code=422,
        content=error_body("VALIDATION_ERROR", message, 422),
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("HTTP_ERROR", str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception(f"{request.method} {request.url.path} error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_ERROR", "Internal server error", 500),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InventoryError, _inventory_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
