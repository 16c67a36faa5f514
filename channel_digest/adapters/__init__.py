"""External platform adapters.

Use the factory function to instantiate the adapter:
    from channel_digest.adapters import get_adapter
    adapter = get_adapter(app_config.youtube)
    channels = adapter.search_channels("acme", api_key)

Exception handling:
    from channel_digest.adapters.exceptions import AdapterError, AdapterHTTPError, AdapterTimeoutError
"""

from .base import BaseAdapter
from .exceptions import (
    AdapterConfigurationError,
    AdapterError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)
from .factory import get_adapter, retry_policy_from_config
from .retry import NO_RETRY, RetryPolicy, call_with_retry
from .youtube import YouTubeAdapter

__all__ = [
    # Base and factory
    "BaseAdapter",
    "get_adapter",
    "retry_policy_from_config",
    # Adapters
    "YouTubeAdapter",
    # Retry
    "RetryPolicy",
    "NO_RETRY",
    "call_with_retry",
    # Exceptions
    "AdapterError",
    "AdapterHTTPError",
    "AdapterTimeoutError",
    "AdapterResponseError",
    "AdapterConfigurationError",
]
