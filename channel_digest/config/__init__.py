"""Configuration management for the channel digest service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    AppConfig,
    BusConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    PipelineConfig,
    ServerConfig,
    YouTubeConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_app_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "YouTubeConfig",
    "PipelineConfig",
    "BusConfig",
    "ServerConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
