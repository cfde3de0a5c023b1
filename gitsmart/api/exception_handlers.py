import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gitsmart.core.exceptions import BaseAPIException, InternalServerError
from gitsmart.infrastructure.git_protocol import NO_CACHE_HEADERS
from gitsmart.infrastructure.middleware.logging import get_correlation_id

logger = structlog.get_logger(__name__)


def _error_headers(correlation_id):
    headers = dict(NO_CACHE_HEADERS)
    if correlation_id:
        headers["X-Correlation-ID"] = correlation_id
    return headers


async def base_api_exception_handler(
    request: Request, exc: BaseAPIException
) -> JSONResponse:
    correlation_id = get_correlation_id()

    logger.error(
        "api_exception",
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        path=request.url.path,
    )

    error_response = exc.to_error_response(correlation_id=correlation_id)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True),
        headers=_error_headers(correlation_id),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    correlation_id = get_correlation_id()

    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )

    headers = _error_headers(correlation_id)
    if exc.headers:
        headers.update(exc.headers)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": f"GSH-{exc.status_code}",
            "message": str(exc.detail),
            "correlation_id": correlation_id,
        },
        headers=headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    correlation_id = get_correlation_id()

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    internal_error = InternalServerError(
        message="An unexpected error occurred",
        details=(
            {"error_type": type(exc).__name__}
            if not getattr(request.app.state, "is_production", True)
            else None
        ),
    )

    error_response = internal_error.to_error_response(correlation_id=correlation_id)

    return JSONResponse(
        status_code=internal_error.status_code,
        content=error_response.model_dump(exclude_none=True),
        headers=_error_headers(correlation_id),
    )
