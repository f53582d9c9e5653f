"""
Configuration Classes for the Taskflow API.

Centralises all environment-dependent settings (database URI, token
secret, CORS allow-list, listening port) into a hierarchy of configuration
classes.  The base ``Config`` class defines development defaults, while
subclasses override only what differs per environment.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

DEV_JWT_SECRET_KEY = "taskflow-dev-jwt-secret-change-in-production"


def _split_origins(raw: str) -> list[str]:
    """Turn a comma-separated origin list into a clean list of origins."""
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    """
    Base configuration with development-safe defaults.

    Attributes:
        SECRET_KEY: Flask session signing key.
        SQLALCHEMY_DATABASE_URI: Database connection string (default: local
            SQLite file).
        JWT_SECRET_KEY: Secret used to sign and verify bearer tokens (HS256).
        JWT_EXPIRY_HOURS: Lifetime of tokens issued by the account endpoints.
        JWT_CLOCK_SKEW_SECONDS: Allowed clock drift when validating ``exp``.
        CORS_ORIGINS: Origins allowed to make credentialed cross-origin calls.
        PORT: Listening port used when the app is started via ``wsgi.py``.
    """

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "taskflow-dev-secret-change-in-production"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}",
    )

    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET_KEY", DEV_JWT_SECRET_KEY)
    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", "720"))
    # Tolerate minor clock differences when checking exp/iat.
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    CORS_ORIGINS: list[str] = _split_origins(
        os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
    )

    PORT: int = int(os.environ.get("PORT", "5000"))


class DevelopmentConfig(Config):
    """Development environment configuration with debug mode enabled."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Uses an in-memory SQLite database by default so test runs never touch
    development data, and a dedicated signing secret for test-minted tokens.
    """

    DEBUG: bool = True
    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL", "sqlite:///:memory:"
    )
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}
    JWT_SECRET_KEY: str = os.environ.get(
        "TEST_JWT_SECRET_KEY", "test-jwt-secret-key-for-local-tests-123456"
    )


class ProductionConfig(Config):
    """
    Production environment configuration.

    All secrets and URIs should be supplied exclusively through environment
    variables; ``create_app`` refuses to start with the development secret.
    """

    DEBUG: bool = False
    TESTING: bool = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Look up and return the configuration class for the given environment.

    Args:
        env: Environment name (``"development"``, ``"testing"``,
            ``"production"``).  When ``None``, falls back to the
            ``FLASK_ENV`` environment variable, defaulting to
            ``"development"``.

    Returns:
        The configuration class (not an instance) for the environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
