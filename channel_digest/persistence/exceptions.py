"""Persistence layer exceptions.

Every persistence failure surfaces as a StoreError so pipeline stages and the
HTTP ingress can treat the job store as one failure domain.
"""


class StoreError(Exception):
    """Base exception for all job store errors."""

    pass


class DatabaseConnectionError(StoreError):
    """Raised when the database cannot be initialized or is not initialized yet.

    Examples:
    - Empty or malformed database URL
    - Database file not accessible
    - get_session() called before init_database()
    """

    pass


class CorruptRecordError(StoreError):
    """A stored job document could not be decoded into a JobRecord."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored record {key} is unreadable: {reason}")
        self.key = key
