"""Custom exceptions for external API adapters."""

# Status codes worth retrying: request timeout, rate limiting and server errors.
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class AdapterError(Exception):
    """Base exception for all adapter errors.

    Pipeline stages catch this to turn any external failure into a job
    failure without crashing the bus.
    """

    @property
    def is_transient(self) -> bool:
        """Whether repeating the same call may succeed."""
        return False


class AdapterHTTPError(AdapterError):
    """HTTP request failed with an error status or never got a response.

    ``status_code`` is 0 when the request failed before a response arrived
    (connection refused, DNS failure, reset).
    """

    def __init__(self, message: str, status_code: int, url: str, reason: str = "") -> None:
        """Initialize HTTP error with status code and URL.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (0 for connection failures)
            url: URL that failed (without credentials)
            reason: API-provided error reason (e.g. "quotaExceeded"), if any
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.reason = reason

    @property
    def is_transient(self) -> bool:
        return self.status_code == 0 or self.status_code in RETRYABLE_STATUS_CODES


class AdapterTimeoutError(AdapterError):
    """HTTP request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url

    @property
    def is_transient(self) -> bool:
        return True


class AdapterResponseError(AdapterError):
    """Response parsing or validation failed (invalid JSON, unexpected shape)."""

    pass


class AdapterConfigurationError(AdapterError):
    """Invalid adapter configuration (bad timeout, empty user agent, no API key)."""

    pass
