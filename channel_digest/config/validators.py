"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect a raw configuration mapping for risky but valid settings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    youtube = config_dict.get("youtube") or {}
    if isinstance(youtube, dict):
        if youtube.get("max_retries") == 0:
            warning_messages.append(
                "youtube.max_retries is 0: transient API failures will fail jobs immediately"
            )
        timeout = youtube.get("request_timeout")
        if isinstance(timeout, int) and timeout > 60:
            warning_messages.append(
                f"Long youtube.request_timeout ({timeout}s) holds a bus worker for the whole call"
            )

    bus = config_dict.get("bus") or {}
    if isinstance(bus, dict) and bus.get("worker_count") == 1:
        warning_messages.append(
            "bus.worker_count is 1: jobs will be processed one stage at a time"
        )

    pipeline = config_dict.get("pipeline") or {}
    if isinstance(pipeline, dict) and pipeline.get("apply_fallback_result") is False:
        warning_messages.append(
            "pipeline.apply_fallback_result is false: the raw-text fallback search "
            "result is discarded and such jobs fail with 'Channel not found'"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
