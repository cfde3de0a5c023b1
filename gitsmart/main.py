from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Optional

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from gitsmart import __version__
from gitsmart.api.exception_handlers import (base_api_exception_handler,
                                             general_exception_handler,
                                             http_exception_handler)
from gitsmart.api.git_http import create_git_router, default_bridge
from gitsmart.core.config import settings
from gitsmart.core.exceptions import BaseAPIException
from gitsmart.core.git import GitProcessBridge
from gitsmart.infrastructure.logging import get_logger, setup_logging
from gitsmart.infrastructure.middleware.logging import RequestLoggingMiddleware

logger = get_logger(__name__)


def create_app(
    repositories: Optional[Dict[Optional[str], Path]] = None,
    bridge: Optional[GitProcessBridge] = None,
) -> FastAPI:
    """
    Build the application serving ``repositories`` (namespace → path).

    Defaults to the repositories named in the settings. A ``None``
    namespace serves the repository at the root.
    """
    if repositories is None:
        repositories = settings.served_repositories()
    bridge = bridge or default_bridge()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        logger.info(
            "application_startup",
            app_name=settings.app_name,
            environment=settings.environment,
            git_binary=bridge.git_binary,
            repositories={str(ns or "/"): str(path) for ns, path in repositories.items()},
        )
        if not repositories:
            logger.warning("no_repositories_configured")

        yield

        logger.info("application_shutdown", app_name=settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Git Smart HTTP transport backed by git stateless-rpc",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.is_production = settings.is_production

    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    for namespace, path in repositories.items():
        app.include_router(create_git_router(path, prefix=namespace, bridge=bridge))

    return app


app = create_app()
