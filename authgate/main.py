"""
authgate - Application Factory

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the authentication stack
3. Mounts the routers, the request gate and the error handlers

All business logic is in the modules, following black box principles.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from authgate import __version__
from authgate.config.provider import ConfigProvider, EnvConfigProvider
from authgate.exceptions import AuthError
from authgate.modules.api.errors import error_response, format_error
from authgate.modules.api.routes import (
    create_auth_router,
    create_secure_router,
    create_status_router,
)
from authgate.modules.auth.factory import AuthFactory, AuthStack
from authgate.modules.middleware import create_request_gate
from authgate.modules.storage import StorageModule

logger = logging.getLogger(__name__)


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    stack: Optional[AuthStack] = None,
) -> FastAPI:
    """
    Create the authgate FastAPI application.

    Args:
        config_provider: Configuration provider (environment by default)
        stack: Pre-built authentication stack; built from config if omitted

    Returns:
        Configured FastAPI application
    """
    config_provider = config_provider or EnvConfigProvider()

    storage: Optional[StorageModule] = None
    if stack is None:
        auth_config = config_provider.get_auth_config()
        redis_client = None
        if auth_config.store_backend == "redis":
            storage = StorageModule(config_provider.get_storage_config().redis_url)
            redis_client = storage.connect()
        stack = AuthFactory.build(config_provider, redis_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - check and release resources.
        """
        logger.info("Starting authgate API...")
        if storage:
            try:
                await storage.ping()
                logger.info(f"Connected to Redis at {storage.url}")
            except redis.ConnectionError as e:
                logger.error(f"Redis not reachable at startup: {e}")

        status = stack.verifier.status()
        if status["initialized"]:
            logger.info(f"Identity provider ready for project {status['projectId']}")
        else:
            logger.warning(f"Identity provider not initialized: {status['error']}")

        yield

        logger.info("Shutting down authgate API...")
        await stack.auth_service.flush_audit()
        if storage:
            await storage.disconnect()
        logger.info("authgate API shutdown complete")

    app = FastAPI(
        title="authgate API",
        description="Self-issued sessions and external identity token verification",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.auth_stack = stack

    app.include_router(create_auth_router(stack.auth_service))
    app.include_router(create_secure_router())
    app.include_router(create_status_router(stack.verifier))

    app.middleware("http")(create_request_gate(stack.verifier))

    # Health/Monitoring Endpoints

    @app.get("/healthz")
    async def healthz():
        """
        Minimal health check endpoint for readiness/liveness probes.

        Returns:
            200: Service is running
        """
        return {"status": "ok"}

    @app.get("/health")
    async def health():
        """Health check with the serving process id."""
        return {"status": "ok", "pid": os.getpid()}

    # Error handlers

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        """Render authentication errors with their generic message."""
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies."""
        logger.debug(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content=format_error(400, "invalid request body"))

    @app.exception_handler(redis.ConnectionError)
    async def redis_error_handler(request: Request, exc: redis.ConnectionError):
        """Handle Redis connection errors."""
        logger.error(f"Redis connection error: {exc}")
        return JSONResponse(status_code=503, content=format_error(503, "Database connection failed"))

    return app
