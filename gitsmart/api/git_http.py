"""FastAPI routes for the Git Smart HTTP Protocol"""

from pathlib import Path
from typing import Callable, Optional, Union

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import QueryParams

from gitsmart.core.config import settings
from gitsmart.core.exceptions import UnrecognizedService
from gitsmart.core.git import GitProcessBridge, Operation
from gitsmart.core.git.git_types import OUTPUT_ENCODING, OUTPUT_ERRORS
from gitsmart.core.routing import RouteSet, build_routes
from gitsmart.infrastructure.git_protocol import (NO_CACHE_HEADERS,
                                                  GitContentType,
                                                  advertisement_packet,
                                                  decode_request_body,
                                                  response_headers)
from gitsmart.infrastructure.logging import get_logger

logger = get_logger(__name__)

FORBIDDEN_MESSAGE = "missing or malformed git service request"


def service_from_query(query_params: QueryParams) -> Optional[Operation]:
    """Resolve the first ``service`` query value, None when absent or unknown"""
    values = query_params.getlist("service")
    if not values:
        return None
    try:
        return Operation.resolve(values[0])
    except UnrecognizedService:
        return None


def default_bridge() -> GitProcessBridge:
    return GitProcessBridge(
        git_binary=settings.git_binary_path,
        timeout=settings.git_timeout_seconds,
    )


def create_git_router(
    repository_path: Union[str, Path],
    prefix: Optional[str] = None,
    bridge: Optional[GitProcessBridge] = None,
) -> APIRouter:
    """
    Build the router serving one repository.

    Given ``prefix="myproject"`` the repository answers on
    ``GET /myproject/info/refs``, ``POST /myproject/git-upload-pack`` and
    ``POST /myproject/git-receive-pack``.
    """
    routes: RouteSet = build_routes(prefix)
    bridge = bridge or default_bridge()
    repo = str(repository_path)
    router = APIRouter(tags=["git"])

    async def get_info_refs(request: Request) -> Response:
        """Reference advertisement for ?service=..."""
        operation = service_from_query(request.query_params)
        if operation is None:
            logger.warning(
                "git_info_refs_rejected",
                service=request.query_params.getlist("service"),
                repository=repo,
            )
            return PlainTextResponse(
                FORBIDDEN_MESSAGE, status_code=403, headers=NO_CACHE_HEADERS
            )

        result = await run_in_threadpool(bridge.advertise, repo, operation)
        body = advertisement_packet(operation) + result.text

        return Response(
            content=body.encode(OUTPUT_ENCODING, errors=OUTPUT_ERRORS),
            headers=response_headers(operation, GitContentType.ADVERTISEMENT),
        )

    def service_endpoint(operation: Operation) -> Callable:
        async def post_service(request: Request) -> Response:
            body = decode_request_body(
                await request.body(),
                operation,
                request.headers.get("content-encoding"),
            )
            logger.info(
                "git_service_request",
                operation=operation.value,
                repository=repo,
                request_size=len(body),
            )

            result = await run_in_threadpool(bridge.exchange, repo, operation, body)

            return Response(
                content=result.output,
                headers=response_headers(operation, GitContentType.RESULT),
            )

        post_service.__name__ = f"post_{operation.name.lower()}"
        return post_service

    router.add_api_route(
        routes.info_refs,
        get_info_refs,
        methods=["GET"],
        response_class=Response,
        name=f"{routes.info_refs}:info_refs",
    )
    for operation in Operation:
        router.add_api_route(
            routes.service_route(operation),
            service_endpoint(operation),
            methods=["POST"],
            response_class=Response,
            name=f"{routes.service_route(operation)}:{operation.value}",
        )

    return router
