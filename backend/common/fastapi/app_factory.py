"""
Common FastAPI application factory with standard middleware and configuration.

This module provides a factory function for creating FastAPI applications with
consistent configuration, middleware, and error handling.

Features:
    - Automatic logging setup
    - CORS configuration (environment-aware)
    - Request timing middleware
    - Global exception handling, including AuthError mapping
    - Shutdown hooks run from the application lifespan
    - Health check endpoints
    - OpenAPI documentation

Middleware:
    - CORS: Configured based on environment (dev vs production)
    - Request Timing: Adds X-Process-Time header to all responses
    - Logging: Automatic request/response logging

Endpoints:
    - GET /: Root endpoint with service information
    - GET /health: Health check endpoint
    - GET /docs: Swagger UI documentation
    - GET /redoc: ReDoc documentation

Usage:
    ```python
    from common.fastapi import create_fastapi_app
    from fastapi import APIRouter

    api_router = APIRouter()

    @api_router.get("/ping")
    async def ping():
        return {"pong": True}

    app = create_fastapi_app(
        service_name="auth-service",
        description="Authentication service",
        api_router=api_router,
        shutdown_hooks=[dispose_engines],
    )
    ```
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from common.config import BaseServiceSettings, get_settings
from common.exceptions import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
    AuthError,
    StoreUnavailableError,
)
from common.logging import setup_logging

GENERIC_ERROR_MESSAGE = (
    "An error occurred while processing your request. Please try again later."
)

ShutdownHook = Callable[[], Awaitable[None]]


def create_fastapi_app(
    service_name: str,
    description: str,
    api_router: APIRouter | None = None,
    additional_setup: Callable[[FastAPI, BaseServiceSettings], None] | None = None,
    root_path: str = "",
    shutdown_hooks: Sequence[ShutdownHook] | None = None,
) -> FastAPI:
    """
    Create a FastAPI application with standardized configuration and middleware.

    This factory function creates a fully configured FastAPI application with:
    - Service-specific settings loaded from configuration
    - Logging configured for the service
    - CORS middleware (environment-aware)
    - Request timing middleware
    - Global exception handling
    - Health check and root endpoints
    - Optional API router inclusion

    Args:
        service_name: Name of the service (e.g., "auth-service"). Used to load
            service-specific settings and configure logging.
        description: Human-readable description of the service. Used in OpenAPI documentation
            and API metadata.
        api_router: Optional FastAPI APIRouter instance containing route definitions.
            If provided, routes are included with the API_V1_STR prefix (default: "/api/v1").
        additional_setup: Optional callback function for additional application setup.
            Called after all standard configuration is complete. Signature:
            `(app: FastAPI, settings: BaseServiceSettings) -> None`
        root_path: Optional root path for reverse proxy scenarios. In DEV environment,
            this is automatically set to empty string.
        shutdown_hooks: Async callables awaited in order when the application shuts
            down (e.g. draining background tasks, disposing database engines). A
            failing hook is logged and the remaining hooks still run.

    Returns:
        Fully configured FastAPI application instance ready to run.

    Side Effects:
        - Configures logging for the service (via setup_logging)
        - Adds middleware to the application
        - Registers exception handlers
        - Creates health check and root endpoints

    Note:
        - CORS is configured differently for DEV vs production environments
        - Unhandled AuthError subclasses map to 503 (store unavailable) or 500
        - All other unhandled exceptions return a generic 500 message
    """

    # Setup logging first
    setup_logging(service_name)

    settings = get_settings(service_name)

    # In development, root_path should be empty as we are not behind a reverse proxy
    effective_root_path = root_path if settings.ENVIRONMENT != "DEV" else ""

    hooks = list(shutdown_hooks or [])

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(f"{settings.SERVICE_NAME} v{settings.SERVICE_VERSION} starting")
        yield
        for hook in hooks:
            try:
                await hook()
            except Exception as e:
                logger.opt(exception=e).error(
                    f"Shutdown hook {getattr(hook, '__name__', hook)} failed"
                )
        logger.info(f"{settings.SERVICE_NAME} stopped")

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        description=description,
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        root_path=effective_root_path,
        lifespan=lifespan,
    )

    if settings.ENVIRONMENT == "production":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # Note: allow_credentials=True is incompatible with allow_origins=["*"]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                "http://localhost:3000",
                "http://localhost:3001",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:3001",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def add_process_time_header(
        request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        """Add process time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s"
        )
        return response

    if api_router:
        app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "healthy",
            "timestamp": time.time(),
        }

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint."""
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "message": f"{settings.SERVICE_NAME} is running",
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        logger.opt(exception=exc.internal_error).error(
            f"[{exc.code.value}] Unhandled auth error in "
            f"{request.method} {request.url.path}: {exc.message}"
        )
        status_code = (
            HTTP_503_SERVICE_UNAVAILABLE
            if isinstance(exc, StoreUnavailableError)
            else HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(status_code=status_code, content={"error": GENERIC_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.opt(exception=exc).error(
            f"Unhandled exception in {request.method} {request.url.path}: {exc}"
        )
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": GENERIC_ERROR_MESSAGE},
        )

    if additional_setup:
        additional_setup(app, settings)

    return app
