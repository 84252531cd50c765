"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, the request-id middleware, and routes.

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures every response (including malformed-body rejections and
  gateway failures) gets X-Request-ID

Upstream Client Lifecycle:
- httpx.AsyncClient is created at startup, stored in app.state
- Gateway wraps the shared client for connection pooling
- Client is closed gracefully at shutdown

Settings are built once in create_app() and stored in app.state.settings.
The gateway and the routes read them from there, never from the environment.
"""

import json
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from riskmap.api.routes import create_api_router
from riskmap.api.routes.gateway import GATEWAY_PATH_PREFIX
from riskmap.config import Settings, get_settings
from riskmap.db.engine import create_db_engine
from riskmap.db.session import create_session_factory
from riskmap.errors import ApiError, ApiErrorCode
from riskmap.gateway import Gateway, GatewayError
from riskmap.logging import configure_logging, get_logger
from riskmap.middleware.request_id import RequestIDMiddleware
from riskmap.responses import (
    api_error_handler,
    error_response,
    gateway_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
)

logger = get_logger(__name__)


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared outbound HTTP client.

    Args:
        settings: Application settings (deadlines and pool size).

    Returns:
        httpx.AsyncClient shared by every gateway operation.
    """
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(
            settings.upstream_timeout_s, connect=settings.upstream_connect_timeout_s
        ),
        limits=httpx.Limits(
            max_connections=settings.upstream_max_connections,
            max_keepalive_connections=20,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle resources.

    - Creates the database engine and session factory from the startup Settings
    - Creates shared httpx.AsyncClient for connection pooling
    - Initializes the Gateway with the startup Settings
    - Cleans up on shutdown
    """
    settings: Settings = app.state.settings

    app.state.db_engine = create_db_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.db_engine)

    app.state.httpx_client = create_http_client(settings)
    app.state.gateway = Gateway(app.state.httpx_client, settings)

    logger.info(
        "gateway_initialized",
        env=settings.riskmap_env.value,
        timeout_s=settings.upstream_timeout_s,
        connect_timeout_s=settings.upstream_connect_timeout_s,
    )

    yield

    await app.state.httpx_client.aclose()
    app.state.db_engine.dispose()
    logger.info("httpx_client_closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (for testing). Defaults to
            the cached settings loaded from the environment.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    configure_logging(json_format=settings.json_logs)

    app = FastAPI(
        title="RiskMap API",
        description="Backend API for RiskMap - location risk lookup and provider gateway",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors on the search history routes."""
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request body"),
        )

    # Gateway routes report malformed JSON in their own flat shape
    @app.middleware("http")
    async def catch_json_decode_errors(request: Request, call_next):
        """Catch JSON decode errors before they reach route handlers."""
        if request.url.path.startswith(GATEWAY_PATH_PREFIX):
            return await call_next(request)

        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body = await request.body()
                if body:
                    try:
                        json.loads(body)
                    except json.JSONDecodeError:
                        return JSONResponse(
                            status_code=400,
                            content=error_response(
                                ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"
                            ),
                        )
        return await call_next(request)

    app.include_router(create_api_router())

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
