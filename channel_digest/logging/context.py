"""Per-job logging context.

Three scopes feed the fields every log record carries:

- the event bus wraps each handler call in ``topic``
- a pipeline stage wraps its work on one job in ``job_id`` and ``stage``
- the submission stage does the same for the job it creates

Fields are kept in a ContextVar. Bus workers run in their own threads and start
with an empty context, so the lines of concurrently handled jobs never carry
each other's ``job_id``.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Dict, Iterator

_fields: ContextVar[Dict[str, Any]] = ContextVar("channel_digest_log_fields", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return dict(_fields.get())


def push_log_context(**fields: Any) -> Token:
    """Layer fields over the active ones; undo with pop_log_context(token)."""
    return _fields.set({**_fields.get(), **fields})


def pop_log_context(token: Token) -> None:
    _fields.reset(token)


def clear_log_context() -> None:
    """Forget every field (test isolation)."""
    _fields.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Scope fields to a ``with`` block, restoring the outer ones on exit.

    Example:
        >>> with log_context(topic="submission-accepted"):
        ...     logger.info("Dispatching")  # carries topic=submission-accepted
    """
    token = push_log_context(**fields)
    try:
        yield get_log_context()
    finally:
        pop_log_context(token)


def job_log_context(job_id: str, stage: str):
    """Scope the fields identifying which stage is working on which job."""
    return log_context(job_id=job_id, stage=stage)
