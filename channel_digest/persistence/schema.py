"""Database schema for the key-value job store."""

from sqlalchemy import Column, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from channel_digest.logging import get_logger

logger = get_logger(__name__, component="database")

Base = declarative_base()

KEY_PREFIX = "job:"


def job_key(job_id: str) -> str:
    """Storage key of a job record."""
    return f"{KEY_PREFIX}{job_id}"


class JobStateModel(Base):
    """One row per job, holding the full record as a JSON document.

    The store only ever reads and overwrites whole documents, so the record
    fields are not broken out into columns.
    """

    __tablename__ = "job_state"

    key = Column(String(128), primary_key=True, nullable=False)
    value = Column(Text, nullable=False)
    # ISO 8601 UTC of the last write
    updated_at = Column(String(50), nullable=False)


def create_schema(engine: Engine) -> None:
    """Create all tables if they don't exist (idempotent)."""
    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
