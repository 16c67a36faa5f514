"""Unit tests for the persistence layer."""

import threading

import pytest
from sqlalchemy import text

from channel_digest.domain.models import JobRecord, JobStatus
from channel_digest.persistence import (
    CorruptRecordError,
    DatabaseConnectionError,
    SqlJobStore,
    StoreError,
    close_database,
    get_session,
    init_database,
    job_key,
)


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_init_database_creates_file(self, tmp_path):
        """Test successful initialization of a file database."""
        db_file = tmp_path / "subdir" / "jobs.db"

        init_database(f"sqlite:///{db_file}")
        try:
            assert db_file.exists()
            with get_session() as session:
                tables = session.execute(
                    text("SELECT name FROM sqlite_master WHERE type='table'")
                ).scalars().all()
            assert "job_state" in tables
        finally:
            close_database()

    def test_init_database_invalid_url_raises_error(self):
        with pytest.raises(DatabaseConnectionError):
            init_database("")

        with pytest.raises(DatabaseConnectionError):
            init_database(None)

    def test_session_before_init_raises(self):
        close_database()
        with pytest.raises(DatabaseConnectionError):
            with get_session():
                pass

    def test_schema_creation_is_idempotent(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'jobs.db'}"
        init_database(db_url)
        init_database(db_url)
        close_database()


class TestSqlJobStore:
    """Tests for SqlJobStore get/set semantics."""

    def test_get_missing_returns_none(self, store):
        assert store.get("job_1_missing") is None

    def test_set_then_get(self, store):
        record = JobRecord.new("job_1_abc", "@acme", "viewer@example.com")
        store.set("job_1_abc", record)

        loaded = store.get("job_1_abc")
        assert loaded.to_document() == record.to_document()

    def test_set_overwrites_whole_record(self, store):
        """Test set() replaces the stored document instead of merging."""
        record = JobRecord.new("job_1_abc", "@acme", "viewer@example.com")
        store.set("job_1_abc", record)
        store.set("job_1_abc", record.fail("Channel not found"))

        loaded = store.get("job_1_abc")
        assert loaded.status is JobStatus.FAILED
        assert loaded.error == "Channel not found"

    def test_records_are_keyed_by_job_prefix(self, store):
        store.set("job_1_abc", JobRecord.new("job_1_abc", "@acme", "viewer@example.com"))

        with get_session() as session:
            keys = session.execute(text("SELECT key FROM job_state")).scalars().all()

        assert keys == [job_key("job_1_abc")] == ["job:job_1_abc"]

    def test_set_rejects_mismatched_key(self, store):
        with pytest.raises(ValueError):
            store.set("job_1_other", JobRecord.new("job_1_abc", "@acme", "viewer@example.com"))

    def test_corrupt_document_raises_store_error(self, store):
        with get_session() as session:
            session.execute(
                text("INSERT INTO job_state (key, value, updated_at) VALUES (:k, :v, :u)"),
                {"k": "job:job_1_bad", "v": "{not json", "u": "2024-05-01T00:00:00Z"},
            )

        with pytest.raises(CorruptRecordError):
            store.get("job_1_bad")

    def test_database_failure_raises_store_error(self, store):
        with get_session() as session:
            session.execute(text("DROP TABLE job_state"))

        with pytest.raises(StoreError):
            store.get("job_1_abc")

        with pytest.raises(StoreError):
            store.set("job_1_abc", JobRecord.new("job_1_abc", "@acme", "viewer@example.com"))

    def test_store_is_shared_across_threads(self, store):
        """Test the in-memory database is visible from worker threads."""
        store.set("job_1_abc", JobRecord.new("job_1_abc", "@acme", "viewer@example.com"))
        seen = []
        worker = threading.Thread(target=lambda: seen.append(store.get("job_1_abc")))
        worker.start()
        worker.join(timeout=5)

        assert seen and seen[0].job_id == "job_1_abc"
