"""Utility functions for identifiers and time handling."""

from .identifiers import JOB_ID_PATTERN, generate_job_id, is_job_id
from .timestamps import ensure_utc, epoch_millis, parse_iso_datetime, utc_now

__all__ = [
    # Identifiers
    "JOB_ID_PATTERN",
    "generate_job_id",
    "is_job_id",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "epoch_millis",
]
