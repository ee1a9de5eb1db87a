"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and a ``validate_settings()``
startup gate that refuses to run production with a missing or default JWT
secret.

IMPORTANT: This module has ZERO imports from the ``kolhub`` package to
prevent circular imports.  Only stdlib, pydantic, pydantic_settings, and
structlog are used.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    ``SecretStr`` fields prevent accidental leaks in logs or error output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # -- Database --------------------------------------------------------------
    database_path: Path = Path("data/kolhub.db")

    # -- Auth (secrets) --------------------------------------------------------
    jwt_secret: SecretStr = SecretStr(DEV_JWT_SECRET)
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24
    bcrypt_rounds: int = 10

    # -- Observability ---------------------------------------------------------
    sentry_dsn: str = ""
    metrics_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    The ``@lru_cache`` decorator ensures environment variables are parsed
    exactly once.  Call ``get_settings.cache_clear()`` in tests to reset.

    Returns:
        The application ``Settings``.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list -- never the full exception
        # which may contain raw SecretStr values.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def validate_settings(settings: Settings) -> None:
    """Enforce a usable JWT secret at startup.

    In **production** mode the application exits with a clear error block if
    the JWT secret is empty or still the development default.  In
    **development** mode each problem is logged as a warning and startup
    continues.

    Args:
        settings: The loaded application settings.
    """
    errors: list[str] = []

    secret = settings.jwt_secret.get_secret_value()
    if not secret:
        errors.append("JWT_SECRET is empty or not set")
    elif secret == DEV_JWT_SECRET:
        errors.append("JWT_SECRET is still the development default")

    if settings.bcrypt_rounds < 4:
        errors.append(f"BCRYPT_ROUNDS must be at least 4, got {settings.bcrypt_rounds}")

    if not errors:
        logger.info("settings_validation_passed")
        return

    if settings.production:
        for err in errors:
            logger.error("setting_invalid", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Invalid settings for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("setting_invalid_dev", detail=err)
