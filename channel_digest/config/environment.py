"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/channel_digest.db"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Values sourced from the process environment.

    The YouTube API key is optional here on purpose: a missing key is reported
    per job by the pipeline stages, it does not prevent the service from
    starting.
    """

    def __init__(
        self,
        youtube_api_key: Optional[str] = None,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.youtube_api_key = youtube_api_key or None
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.log_level = log_level
        self.environment = environment or "local"

    @property
    def has_api_key(self) -> bool:
        return bool(self.youtube_api_key)


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Recognised variables (all optional):
    - YOUTUBE_API_KEY: YouTube Data API v3 key used by the pipeline stages
    - DATABASE_URL: SQLAlchemy URL of the job store (default: sqlite:///./data/channel_digest.db)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - ENVIRONMENT: Environment label attached to log records (default: local)

    Returns:
        EnvironmentConfig with validated values

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    errors = []

    youtube_api_key = os.getenv("YOUTUBE_API_KEY", "").strip()
    database_url = os.getenv("DATABASE_URL", "").strip()
    log_level = os.getenv("LOG_LEVEL", "").strip()
    environment = os.getenv("ENVIRONMENT", "").strip()

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if database_url and "://" not in database_url:
        errors.append(
            f"Invalid DATABASE_URL: '{database_url}'. Expected a URL such as {DEFAULT_DATABASE_URL}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Unset variables you do not need; every variable is optional",
            ],
        )

    return EnvironmentConfig(
        youtube_api_key=youtube_api_key or None,
        database_url=database_url or None,
        log_level=log_level.upper() if log_level else None,
        environment=environment or None,
    )
