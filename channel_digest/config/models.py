"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class YouTubeConfig(BaseModel):
    """Settings for the YouTube Data API adapter."""

    api_base_url: str = Field(
        "https://www.googleapis.com/youtube/v3",
        description="Base URL of the YouTube Data API v3",
    )
    request_timeout: int = Field(
        10, ge=1, le=120, description="Timeout for a single API call (seconds)"
    )
    user_agent: str = Field(
        "ChannelDigest/1.0", min_length=1, description="User-Agent header for API calls"
    )
    max_retries: int = Field(
        2, ge=0, le=10, description="Retries for transient API failures (0 = no retries)"
    )
    retry_initial_delay: float = Field(
        1.0, ge=0.0, le=60.0, description="Delay before the first retry (seconds)"
    )
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier between retries"
    )
    retry_max_delay: float = Field(
        30.0, ge=0.0, le=300.0, description="Upper bound for a single retry delay (seconds)"
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        return stripped

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class PipelineConfig(BaseModel):
    """Behaviour of the resolution and listing stages."""

    page_size: int = Field(
        5, ge=1, le=50, description="Maximum number of recent items listed per job"
    )
    apply_fallback_result: bool = Field(
        True,
        description=(
            "Use the raw-text fallback search result when the handle lookup "
            "returns nothing"
        ),
    )


class BusConfig(BaseModel):
    """Event bus settings."""

    worker_count: int = Field(
        4, ge=1, le=64, description="Worker threads delivering events to stage handlers"
    )


class ServerConfig(BaseModel):
    """HTTP ingress settings."""

    host: str = Field("127.0.0.1", min_length=1, description="Interface to bind")
    port: int = Field(8000, ge=1, le=65535, description="Port to listen on")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the channel digest service."""

    youtube: YouTubeConfig = Field(default_factory=YouTubeConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    bus: BusConfig = Field(default_factory=BusConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_retry_window(self):
        """Reject retry settings whose worst case outlives the bus worker.

        Every retry blocks a bus worker, so the sum of backoff delays is
        capped to keep one job from starving the pool.
        """
        yt = self.youtube
        total_delay = 0.0
        delay = yt.retry_initial_delay
        for _ in range(yt.max_retries):
            total_delay += min(delay, yt.retry_max_delay)
            delay *= yt.retry_backoff_multiplier

        if total_delay > 600:
            raise ValueError(
                f"youtube retry settings allow {total_delay:.0f}s of backoff per call; "
                "the maximum is 600s"
            )
        return self
