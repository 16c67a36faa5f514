"""Base adapter class with shared HTTP handling for external APIs.

Subclasses call _get_json(), which applies the configured timeout to every
request, maps transport and HTTP failures onto the adapter exception
hierarchy, and retries transient failures with backoff.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from channel_digest.domain.models import ChannelCandidate, Item
from channel_digest.logging import get_logger

from .exceptions import (
    AdapterConfigurationError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)
from .retry import RetryPolicy, call_with_retry

logger = get_logger(__name__, component="adapter")


class BaseAdapter(ABC):
    """Base class for video platform adapters.

    Declares the two capabilities the pipeline depends on, channel search and
    recent item listing, and provides the shared request handling.

    Attributes:
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        retry_policy: Retry policy for transient failures
    """

    ADAPTER_NAME = "base"

    def __init__(
        self,
        timeout: int = 10,
        user_agent: str = "ChannelDigest/1.0",
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize adapter with configuration.

        Args:
            timeout: HTTP request timeout in seconds (1-120)
            user_agent: User-Agent header for requests
            retry_policy: Retry policy for transient failures (default: RetryPolicy())
            session: Preconfigured requests session (a new one is created if None)

        Raises:
            AdapterConfigurationError: If timeout is outside valid range or user_agent is empty
        """
        if not 1 <= timeout <= 120:
            raise AdapterConfigurationError(
                f"Timeout must be between 1 and 120 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise AdapterConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.retry_policy = retry_policy or RetryPolicy()

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    @abstractmethod
    def search_channels(self, query: str, api_key: str) -> List[ChannelCandidate]:
        """Search channels by free text, best match first.

        Args:
            query: Handle text or raw channel text
            api_key: API credential

        Returns:
            Zero or more candidates

        Raises:
            AdapterError: On failures that survive the retry policy
        """

    @abstractmethod
    def list_recent_items(self, channel_id: str, api_key: str, limit: int) -> List[Item]:
        """List up to ``limit`` recently published items of a channel.

        Args:
            channel_id: Resolved channel identifier
            api_key: API credential
            limit: Maximum number of items requested

        Returns:
            Items, newest first as reported by the API

        Raises:
            AdapterError: On failures that survive the retry policy
        """

    def _get_json(self, url: str, params: Dict[str, str], description: str) -> Dict[str, Any]:
        """GET url and return the decoded JSON object, retrying transient failures."""
        return call_with_retry(
            lambda: self._make_request(url, params=params),
            self.retry_policy,
            description=f"{self.ADAPTER_NAME} {description}",
        )

    def _make_request(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Perform a single GET request.

        Args:
            url: URL to request (credentials go in params, never in the URL)
            params: Query parameters

        Returns:
            Parsed JSON object

        Raises:
            AdapterHTTPError: On 4xx/5xx status or connection failure
            AdapterTimeoutError: On request timeout
            AdapterResponseError: On a body that is not a JSON object
        """
        logger.debug(
            f"HTTP GET request to {url}",
            extra={"event": "adapter.fetch.request", "url": url, "timeout": self.timeout},
        )

        try:
            response = self._session.request(
                method="GET",
                url=url,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "adapter.fetch.retryable_error", "error_type": "Timeout", "url": url},
            )
            raise AdapterTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(
                f"Request to {url} failed: {type(e).__name__}",
                extra={"event": "adapter.fetch.retryable_error", "error_type": type(e).__name__, "url": url},
            )
            raise AdapterHTTPError(
                f"Request to {url} failed: {type(e).__name__}", status_code=0, url=url
            ) from e

        if response.status_code >= 400:
            message, reason = self._error_details(response)
            error = AdapterHTTPError(
                f"HTTP {response.status_code}: {message}",
                status_code=response.status_code,
                url=url,
                reason=reason,
            )
            logger.log(
                logging.WARNING if error.is_transient else logging.ERROR,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "adapter.fetch.retryable_error" if error.is_transient else "adapter.fetch.error",
                    "status_code": response.status_code,
                    "url": url,
                    "reason": reason,
                },
            )
            raise error

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                f"Failed to parse JSON response from {url}",
                extra={"event": "adapter.fetch.error", "error_type": "JSONDecodeError", "url": url},
            )
            raise AdapterResponseError(f"Failed to parse JSON response from {url}: {e}") from e

        if not isinstance(data, dict):
            raise AdapterResponseError(
                f"Expected JSON object response from {url}, got {type(data).__name__}"
            )

        logger.debug(
            "HTTP request succeeded",
            extra={"event": "adapter.fetch.succeeded", "status_code": response.status_code, "url": url},
        )
        return data

    @staticmethod
    def _error_details(response: requests.Response) -> tuple[str, str]:
        """Extract (message, reason) from a Google-style JSON error body."""
        try:
            body = response.json()
        except ValueError:
            return response.reason or "error", ""

        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return response.reason or "error", ""

        message = error.get("message") or response.reason or "error"
        reason = ""
        details = error.get("errors")
        if isinstance(details, list) and details and isinstance(details[0], dict):
            reason = details[0].get("reason", "") or ""
        return message, reason
