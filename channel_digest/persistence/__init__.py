"""Persistence layer for job records.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Job store
    - JobStore: abstract get/set interface used by the pipeline stages
    - SqlJobStore: SQLAlchemy-backed implementation

    # Exceptions
    - StoreError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - CorruptRecordError: Stored document cannot be decoded

Example usage:
    >>> from channel_digest.persistence import init_database, SqlJobStore
    >>> init_database("sqlite:///./data/channel_digest.db")
    >>> store = SqlJobStore()
    >>> store.get("job_1700000000000_abc1234") is None
    True
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import CorruptRecordError, DatabaseConnectionError, StoreError
from .schema import job_key
from .store import JobStore, SqlJobStore

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Store
    "JobStore",
    "SqlJobStore",
    "job_key",
    # Exceptions
    "StoreError",
    "DatabaseConnectionError",
    "CorruptRecordError",
]
