"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from src.config import Settings


def test_defaults():
    settings = Settings()
    assert settings.jwt_expiration_days == 30
    assert settings.request_timeout_seconds == 15
    assert "http://localhost:3000" in settings.allowed_origins


def test_production_requires_real_secret():
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        Settings(environment="production", database_url="postgresql://u:p@db:5432/accounts")


def test_production_rejects_localhost_database():
    with pytest.raises(ValidationError, match="DATABASE_URL"):
        Settings(
            environment="production",
            jwt_secret="a-real-secret",
            database_url="postgresql://u:p@localhost:5432/accounts",
        )


def test_settings_are_immutable():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.jwt_secret = "changed"
