"""Shared response schemas."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    database: str
    uptime: float
