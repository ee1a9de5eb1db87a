"""Application entry point: the FastAPI REST backend.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Services** (database connection, gateway, auth services, resource handlers)
  built once and injected through ``app.state.services``
- **Observability**: request IDs, Prometheus ``/metrics``, optional Sentry
- **Error envelopes** for ``ApiError``, malformed requests and uncaught errors
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kolhub.api.routes import ROUTERS
from kolhub.auth import PasswordHasher, TokenService
from kolhub.config import Settings, get_settings, validate_settings
from kolhub.domain.errors import ApiError
from kolhub.handlers import (
    CampaignHandler,
    KolHandler,
    KolTypeHandler,
    ReportHandler,
    UserHandler,
    failure,
)
from kolhub.health import register_health_routes
from kolhub.observability.metrics import setup_metrics
from kolhub.observability.middleware import RequestIdMiddleware
from kolhub.observability.sentry import get_sentry_processor, init_sentry
from kolhub.persistence import Gateway, close_db, init_db

logger = structlog.get_logger()


def configure_logging(production: bool = False, sentry_enabled: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry_enabled: Forward ERROR-level events to Sentry.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if sentry_enabled:
        shared_processors.append(get_sentry_processor())

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="kolhub")


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Set up all shared services for the application.

    Opens the database (creating the schema), wraps it in a ``Gateway``,
    builds the password and token services, and constructs one handler per
    resource over that single gateway.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {"_settings": settings}

    db_path = settings.database_path
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = init_db(db_path)
    services["db_conn"] = conn
    logger.info("Database initialized", path=str(db_path))

    gateway = Gateway(conn)
    services["gateway"] = gateway

    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    tokens = TokenService(
        secret=settings.jwt_secret.get_secret_value(),
        algorithm=settings.jwt_algorithm,
        expiration=timedelta(hours=settings.jwt_expiration_hours),
    )
    services["hasher"] = hasher
    services["tokens"] = tokens

    services["handlers"] = {
        "campaigns": CampaignHandler(gateway),
        "kols": KolHandler(gateway),
        "kol_types": KolTypeHandler(gateway),
        "reports": ReportHandler(gateway),
        "users": UserHandler(gateway, hasher, tokens),
    }
    logger.info("Services initialized", handlers=sorted(services["handlers"]))
    return services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Lifespan context manager for FastAPI startup and shutdown.

    On shutdown: closes the database connection.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application.
    """
    services = app.state.services
    logger.info("FastAPI application starting")
    yield
    conn = services.get("db_conn")
    if conn is not None:
        close_db(conn)
        logger.info("Database connection closed")


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ``ApiError`` as a failure envelope."""
    return failure(exc.status_code, exc.message, exc.error).to_response()


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed path/query/body input as a 400 failure envelope."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    logger.info("Request validation failed", path=request.url.path, problems=problems)
    return failure(400, "Invalid request parameters.", problems).to_response()


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render any uncaught exception as a 500 failure envelope."""
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return failure(500, "Internal server error.", str(exc)).to_response()


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with middleware, routers, and health routes.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    settings: Settings = services.get("_settings") or get_settings()

    fastapi_app = FastAPI(title="KOL Campaign Backend", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = settings

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Request-ID"],
        max_age=86400,
    )
    fastapi_app.add_middleware(RequestIdMiddleware)

    fastapi_app.add_exception_handler(ApiError, handle_api_error)
    fastapi_app.add_exception_handler(RequestValidationError, handle_validation_error)
    fastapi_app.add_exception_handler(Exception, handle_unexpected_error)

    register_health_routes(fastapi_app)
    for router in ROUTERS:
        fastapi_app.include_router(router)

    if settings.metrics_enabled:
        setup_metrics(fastapi_app)

    return fastapi_app


def main() -> None:
    """Main entry point: configure, build services, and serve with uvicorn.

    1. Configure logging (and Sentry when a DSN is set)
    2. Validate settings
    3. Initialize services
    4. Create the FastAPI app and run uvicorn
    """
    settings = get_settings()
    sentry_enabled = init_sentry(
        settings.sentry_dsn,
        environment="production" if settings.production else "development",
    )
    configure_logging(production=settings.production, sentry_enabled=sentry_enabled)
    logger.info("Application starting")

    validate_settings(settings)

    services = initialize_services(settings)
    fastapi_app = create_app(services)

    uvicorn.run(fastapi_app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    main()
