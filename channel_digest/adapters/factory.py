"""Factory function for instantiating the platform adapter."""

from typing import Optional

import requests

from channel_digest.config.models import YouTubeConfig
from channel_digest.logging import get_logger

from .exceptions import AdapterConfigurationError
from .retry import RetryPolicy
from .youtube import YouTubeAdapter

logger = get_logger(__name__, component="adapter")


def retry_policy_from_config(youtube_config: YouTubeConfig) -> RetryPolicy:
    return RetryPolicy(
        max_retries=youtube_config.max_retries,
        initial_delay=youtube_config.retry_initial_delay,
        backoff_multiplier=youtube_config.retry_backoff_multiplier,
        max_delay=youtube_config.retry_max_delay,
    )


def get_adapter(
    youtube_config: YouTubeConfig, session: Optional[requests.Session] = None
) -> YouTubeAdapter:
    """Create the YouTube adapter from configuration.

    The API key is not part of the adapter; stages pass it per call.

    Args:
        youtube_config: Adapter settings (base URL, timeout, user agent, retries)
        session: Optional requests session to reuse

    Returns:
        Configured YouTubeAdapter

    Raises:
        AdapterConfigurationError: If the configuration is rejected by the adapter

    Example:
        >>> adapter = get_adapter(YouTubeConfig())
        >>> adapter.search_channels("acme", api_key="...")
    """
    try:
        adapter = YouTubeAdapter(
            api_base_url=youtube_config.api_base_url,
            timeout=youtube_config.request_timeout,
            user_agent=youtube_config.user_agent,
            retry_policy=retry_policy_from_config(youtube_config),
            session=session,
        )
    except AdapterConfigurationError:
        raise
    except Exception as e:
        raise AdapterConfigurationError(f"Failed to create youtube adapter: {e}") from e

    logger.debug(
        "Created adapter instance",
        extra={
            "adapter_class": type(adapter).__name__,
            "timeout": adapter.timeout,
            "max_retries": adapter.retry_policy.max_retries,
        },
    )
    return adapter
