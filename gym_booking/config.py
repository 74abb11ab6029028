"""Application configuration helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Type


class BaseConfig:
    """Base configuration shared across environments."""

    PROJECT_ROOT = Path(__file__).resolve().parent.parent
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{PROJECT_ROOT / 'gym_booking.db'}"
    SQLITE_TIMEOUT = float(os.getenv("SQLITE_TIMEOUT", "5.0"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Bearer-token JSON API.
    WTF_CSRF_ENABLED = False

    BOOKING_COOLDOWN_MINUTES = 10
    MACHINES_DEFAULT_PAGE_SIZE = 10
    MACHINES_MAX_PAGE_SIZE = 50
    AUTH_TOKEN_MAX_AGE = 24 * 60 * 60  # seconds


class DevelopmentConfig(BaseConfig):
    """Configuration tweaks for local development."""

    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """In-memory database configuration for pytest."""

    DEBUG = False
    TESTING = True
    DATABASE_URL = "sqlite:///:memory:"
    SQLITE_TIMEOUT = 1.0


class ProductionConfig(BaseConfig):
    """Production hardened configuration."""

    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def get_config() -> Type[BaseConfig]:
    """Return the configuration class based on FLASK_ENV."""

    env = os.getenv("FLASK_ENV", "development").lower()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
