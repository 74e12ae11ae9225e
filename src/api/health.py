"""Service status endpoints."""

import logging
import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.database import get_db, ping
from src.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    """Welcome payload."""
    return {
        "message": "Welcome to the API",
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable"}},
)
def health_check(request: Request, db: Annotated[Session, Depends(get_db)]):
    """Health check endpoint; pings the database."""
    try:
        ping(db)
    except SQLAlchemyError as e:
        logger.warning(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "disconnected"},
        )

    return HealthResponse(
        status="ok",
        database="connected",
        uptime=round(time.monotonic() - request.app.state.started_at, 3),
    )
