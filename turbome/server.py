"""
FastAPI application definition for the TurboMe server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from turbome import __version__
from turbome.api import files, git, markdown, search, workspaces
from turbome.services.base import ServiceError
from turbome.services.git_repository import GitRepository
from turbome.utils.config import ServiceConfig
from turbome.utils.dependencies import get_base_config, get_storage_root

# Get a module-level logger
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate the storage root before serving and optionally create the repository."""
    config: ServiceConfig = app.state.config
    root = get_storage_root()

    if config.GIT_AUTO_INIT:
        repository = GitRepository(
            root,
            timeout=config.GIT_TIMEOUT,
            probe_timeout=config.GIT_PROBE_TIMEOUT,
            default_branch=config.GIT_DEFAULT_BRANCH,
        )
        try:
            if await repository.init_if_absent():
                logger.info(f"Created git repository in {root}")
        except ServiceError as e:
            logger.warning(f"Could not initialize git repository in {root}: {e.message}")
    yield


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error_code": exc.error_code, "message": exc.message},
    )


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
    )


def build_server(config: ServiceConfig) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        config: The server's service configuration.

    Returns:
        A configured FastAPI instance with every router mounted.
    """
    logger.info(
        "Initializing TurboMe server",
        extra={"host": config.HOST, "port": config.PORT},
    )
    app = FastAPI(title="TurboMe", version=__version__, lifespan=lifespan)
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)

    for module in (files, markdown, git, workspaces, search):
        app.include_router(module.router)

    @app.get("/api")
    def welcome() -> dict[str, Any]:
        return {"success": True, "message": "Welcome to the TurboMe API", "version": __version__}

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {
            "success": True,
            "data": {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()},
        }

    return app


# Get the base configuration for server initialization.
# This is also imported by main.py to run the server.
server_config = get_base_config()
app = build_server(server_config)
