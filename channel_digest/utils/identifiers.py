"""Job identifier generation."""

import re
import secrets
import string
from datetime import datetime
from typing import Optional

from .timestamps import epoch_millis

JOB_ID_PATTERN = re.compile(r"^job_\d+_[a-z0-9]+$")

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 7


def generate_job_id(now: Optional[datetime] = None) -> str:
    """Create a job identifier of the form ``job_<epoch ms>_<7 chars>``.

    The millisecond component orders identifiers by creation time; the random
    suffix separates jobs submitted within the same millisecond.

    Example:
        >>> bool(JOB_ID_PATTERN.match(generate_job_id()))
        True
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"job_{epoch_millis(now)}_{suffix}"


def is_job_id(value: str) -> bool:
    return bool(JOB_ID_PATTERN.match(value or ""))
