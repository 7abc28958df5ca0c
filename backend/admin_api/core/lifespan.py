"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from admin_api.container import AppContainer
from shared.config.logging import admin_api_logger as logger, setup_logging
from shared.config.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: logging, configuration checks, container, change feed.
    Shutdown: everything the container owns is closed.

    A container already present on ``app.state`` is used as-is.
    """
    settings = get_settings()
    setup_logging()

    secret_errors = settings.validate_production_secrets()
    if secret_errors:
        for error in secret_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(secret_errors)}. "
                "Server will not start with insecure configuration."
            )
        logger.warning("Running with insecure defaults (acceptable for development only)")

    container: AppContainer | None = getattr(app.state, "container", None)
    if container is None:
        container = AppContainer.build(settings)
        app.state.container = container

    logger.info(
        "Starting admin API",
        port=settings.api_port,
        env=settings.environment,
        store=container.store.backend_name,
        change_feed=container.change_feed is not None,
    )
    await container.start()

    yield

    logger.info("Shutting down admin API")
    await container.aclose()
