"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from src import database
from src.api import auth, health
from src.api.errors import setup_exception_handlers
from src.api.middleware import setup_middleware
from src.config import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events.

    Startup fails, and the server exits non-zero, if the database stays
    unreachable after the configured retries.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting account API ({settings.environment})")

    await database.wait_for_database(app.state.engine, settings)
    if not settings.is_production:
        database.init_db(app.state.engine)

    app.state.started_at = time.monotonic()
    logger.info(f"Allowed origins: {', '.join(settings.allowed_origins)}")

    yield

    app.state.engine.dispose()
    logger.info("Database connection closed, shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for the given settings (defaults to the environment)."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Account API",
        description="User signup, login and profile management",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = database.build_engine(settings)
    app.state.session_factory = database.build_session_factory(app.state.engine)
    app.state.started_at = time.monotonic()
    if settings is not get_settings():
        app.dependency_overrides[get_settings] = lambda: settings

    setup_exception_handlers(app, settings)
    setup_middleware(app, settings)

    # Register routers; /api/auth is the path existing clients use
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(auth.router, prefix="/api/auth", include_in_schema=False)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
