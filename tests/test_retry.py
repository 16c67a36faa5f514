"""Unit tests for the adapter retry policy."""

import pytest

from channel_digest.adapters import (
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
    RetryPolicy,
    call_with_retry,
)


class FlakyCall:
    """Callable that raises the queued errors before returning a value."""

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestRetryPolicy:
    def test_delays_grow_and_are_capped(self):
        policy = RetryPolicy(max_retries=4, initial_delay=1.0, backoff_multiplier=3.0, max_delay=5.0)
        assert list(policy.delays()) == [1.0, 3.0, 5.0, 5.0]

    def test_no_retries(self):
        assert list(RetryPolicy(max_retries=0).delays()) == []


class TestCallWithRetry:
    """Tests for call_with_retry()."""

    def test_success_first_try(self):
        func = FlakyCall([])
        sleeps = []

        assert call_with_retry(func, RetryPolicy(), sleep=sleeps.append) == "ok"
        assert func.calls == 1
        assert sleeps == []

    def test_transient_errors_are_retried(self):
        func = FlakyCall([AdapterTimeoutError("slow", url="u"), AdapterHTTPError("503", 503, "u")])
        sleeps = []

        result = call_with_retry(func, RetryPolicy(max_retries=2, initial_delay=1.0), sleep=sleeps.append)

        assert result == "ok"
        assert func.calls == 3
        assert sleeps == [1.0, 2.0]

    def test_gives_up_with_last_error(self):
        last = AdapterHTTPError("429", 429, "u")
        func = FlakyCall([AdapterTimeoutError("slow", url="u"), last])

        with pytest.raises(AdapterHTTPError) as exc_info:
            call_with_retry(func, RetryPolicy(max_retries=1), sleep=lambda s: None)

        assert exc_info.value is last
        assert func.calls == 2

    def test_permanent_error_not_retried(self):
        func = FlakyCall([AdapterHTTPError("404", 404, "u")])

        with pytest.raises(AdapterHTTPError):
            call_with_retry(func, RetryPolicy(max_retries=3), sleep=lambda s: None)

        assert func.calls == 1

    def test_response_error_not_retried(self):
        func = FlakyCall([AdapterResponseError("bad json")])

        with pytest.raises(AdapterResponseError):
            call_with_retry(func, RetryPolicy(max_retries=3), sleep=lambda s: None)

        assert func.calls == 1
