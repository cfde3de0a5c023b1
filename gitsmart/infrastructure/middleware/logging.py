import time
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.datastructures import QueryParams
from starlette.middleware.base import BaseHTTPMiddleware

from gitsmart.infrastructure.logging import (bind_context, clear_context,
                                             get_logger)

logger = get_logger(__name__)

correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def service_token(query_params: QueryParams) -> Optional[str]:
    """First `service` value, the one the request is dispatched on"""
    values = query_params.getlist("service")
    return values[0] if values else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Correlation ID propagation and access logging for git requests"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        correlation_id_var.set(correlation_id)

        clear_context()
        bind_context(
            correlation_id=correlation_id,
            request_method=request.method,
            request_path=request.url.path,
            client_ip=self._get_client_ip(request),
        )
        service = service_token(request.query_params)
        if service:
            bind_context(git_service=service)

        logger.info(
            "http_request_started",
            user_agent=request.headers.get("user-agent", "unknown"),
            git_protocol=request.headers.get("git-protocol"),
            request_size=request.headers.get("content-length", 0),
            content_encoding=request.headers.get("content-encoding"),
        )

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                "http_request_completed",
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
                response_size=response.headers.get("content-length", 0),
            )

            response.headers["X-Correlation-ID"] = correlation_id
            clear_context()
            correlation_id_var.set(None)
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "http_request_failed",
                duration_ms=round(duration * 1000, 2),
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True,
            )
            # context stays bound for the server error handler
            raise

    def _get_client_ip(self, request: Request) -> str:
        """Extract real client IP from request"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
