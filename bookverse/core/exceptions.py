import logging
from typing import TypeVar

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from bookverse.services.errors import Error, Result, to_http_payload

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DomainHTTPError(Exception):
    """A failed service ``Result`` on its way out of a router."""

    def __init__(self, error: Error):
        self.error = error
        self.status_code, self.payload = to_http_payload(error)
        super().__init__(error.message)


def unwrap(result: Result[T]) -> T:
    """Return the success value or raise ``DomainHTTPError`` for the failure."""
    if result.is_failure:
        raise DomainHTTPError(result.error)
    return result.value


def setup_exception_handlers(app: FastAPI):
    """Add custom exception handlers to the FastAPI app."""

    @app.exception_handler(DomainHTTPError)
    async def handle_domain_error(request: Request, exc: DomainHTTPError):
        logger.warning(
            f"Domain error on {request.method} {request.url.path}: {exc.error.code}",
            extra={"error_code": exc.error.code, "error_kind": exc.error.kind.value},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.payload)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"type": "error", "data": {"message": exc.detail}},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_generic_exception(request: Request, exc: Exception):
        logger.error(f"An unexpected error occurred: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"type": "error", "data": {"message": "An internal server error occurred."}},
        )

    logger.info("Exception handlers configured.")
