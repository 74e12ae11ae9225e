"""Database configuration and session management.

Each application builds its own engine and session factory from its settings
(see ``src.main.create_app``); they live on ``app.state``.
"""

import asyncio
import logging
from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from src.config import Settings

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database cannot be reached during startup."""


def build_engine(settings: Settings) -> Engine:
    """Create an engine whose connects and statements are bounded by the settings."""
    if settings.database_url.startswith("sqlite"):
        return create_engine(
            settings.database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.db_connect_timeout,
            },
        )
    statement_timeout_ms = int(settings.request_timeout_seconds * 1000)
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=settings.db_pool_timeout,
        connect_args={
            "connect_timeout": settings.db_connect_timeout,
            "options": f"-c statement_timeout={statement_timeout_ms}",
        },
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


Base: Any = declarative_base()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that provides a database session from the app's session factory."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from src import models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def ping(bind: Engine | Session) -> None:
    """Run a trivial query; raises SQLAlchemyError if the database is unreachable."""
    if isinstance(bind, Session):
        bind.execute(text("SELECT 1"))
        return
    with bind.connect() as connection:
        connection.execute(text("SELECT 1"))


def backoff_delay(attempt: int, initial_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (1-based), doubling each time."""
    return min(initial_delay * (2 ** (attempt - 1)), max_delay)


async def wait_for_database(bind: Engine, config: Settings) -> None:
    """Block startup until the database answers, retrying with exponential backoff.

    Raises:
        DatabaseUnavailableError: after ``db_connect_max_attempts`` failed pings.
    """
    attempts = config.db_connect_max_attempts
    for attempt in range(1, attempts + 1):
        try:
            ping(bind)
        except SQLAlchemyError as e:
            logger.error(f"Database connection attempt {attempt}/{attempts} failed: {e}")
            if attempt == attempts:
                break
            delay = backoff_delay(
                attempt, config.db_connect_initial_delay, config.db_connect_max_delay
            )
            logger.info(f"Retrying database connection in {delay:.1f}s")
            await asyncio.sleep(delay)
        else:
            logger.info("Database connected")
            return

    raise DatabaseUnavailableError(f"Database unreachable after {attempts} attempts")
