import logging
import time
import uuid

from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .logging_config import request_id_var, user_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time-MS"


async def logging_middleware(request: Request, call_next) -> Response:
    """
    Tag the request with an id (reusing the caller's ``X-Request-ID`` when
    present), time it, and log one access line once the response is ready.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request_token = request_id_var.set(request_id)
    # The auth dependency fills this in for authenticated calls
    user_token = user_id_var.set(None)

    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = str(elapsed_ms)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={"status_code": response.status_code, "duration_ms": elapsed_ms},
        )
        return response
    finally:
        user_id_var.reset(user_token)
        request_id_var.reset(request_token)


def setup_cors_middleware(app, cors_origins: str):
    """Allow the comma-separated ``cors_origins`` (the reading-list web client)."""
    origins = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, PROCESS_TIME_HEADER],
    )
