"""FastAPI application factory.

Middleware run in reverse order of registration: the request context is
established first, then request logging wraps the route handlers.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from loguru import logger

from complia.api.constants import API_PREFIX
from complia.api.middleware.error_handler import register_exception_handlers
from complia.api.middleware.request_context import RequestContextMiddleware
from complia.api.middleware.request_logging import RequestLoggingMiddleware
from complia.api.routes import api_router
from complia.api.utils.responses import ORJSONResponse
from complia.core.config import Settings, get_settings
from complia.core.logging import setup_logging
from complia.core.observability import instrument_app, setup_tracing
from complia.domain.scheduling.holidays import build_holiday_calendar
from complia.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_engine,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Verify the database on startup and dispose the engine on shutdown.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )
    yield

    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. Defaults to get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.holiday_calendar = build_holiday_calendar(
        settings.scheduling_config
    )

    register_exception_handlers(application)
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(api_router, prefix=API_PREFIX)

    @application.get("/health")
    async def health() -> dict[str, object]:
        """Liveness check; reports ``degraded`` when the database is unreachable."""
        is_healthy, error_msg = await check_database_connection()
        if not is_healthy:
            logger.warning("Database health check failed: {}", error_msg)
            return {"status": "degraded", "database": False}

        pool = get_engine().pool
        logger.bind(
            metric_type="db.pool.health",
            checked_out=cast("Any", pool).checkedout(),
            size=cast("Any", pool).size(),
        ).debug("Database pool health check")
        return {"status": "healthy", "database": True}

    instrument_app(application, settings)
    return application
