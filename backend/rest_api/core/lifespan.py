"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine, SessionLocal
from shared.config.settings import settings
from shared.config.logging import setup_logging, rest_api_logger as logger
from rest_api.models import Base
from rest_api.seed import seed


def check_configuration() -> None:
    """
    Log configuration problems; refuse to start with them in production.

    Raises:
        RuntimeError: In production when any check fails
    """
    config_errors = settings.validate_production_settings()
    if not config_errors:
        return

    for error in config_errors:
        logger.error("Configuration error: %s", error)
    if settings.environment == "production":
        raise RuntimeError(
            f"Production configuration errors: {'; '.join(config_errors)}. "
            "Server will not start with unsafe configuration."
        )
    logger.warning("Running with development defaults (acceptable for development only)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Initialize logging
    setup_logging()
    check_configuration()

    # Startup
    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)

    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    # Seed demo data
    if settings.seed_demo_data:
        with SessionLocal() as db:
            seed(db)

    yield

    # Shutdown
    logger.info("Shutting down REST API")
    engine.dispose()
