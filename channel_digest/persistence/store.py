"""Job store: whole-record get/set keyed by ``job:<jobID>``."""

import json
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from channel_digest.domain.models import JobRecord
from channel_digest.logging import get_logger
from channel_digest.utils.timestamps import utc_now

from .database import get_session
from .exceptions import CorruptRecordError, StoreError
from .schema import JobStateModel, job_key

logger = get_logger(__name__, component="store")


class JobStore(ABC):
    """Key-value persistence for job records.

    set() overwrites the whole record; there is no partial update and no
    optimistic concurrency check. Callers merge the previous fields before
    writing (see JobRecord.advance).
    """

    @abstractmethod
    def get(self, job_id: str) -> Optional[JobRecord]:
        """Return the record of job_id, or None if it does not exist.

        Raises:
            StoreError: If the store cannot be read
        """

    @abstractmethod
    def set(self, job_id: str, record: JobRecord) -> None:
        """Write record under job_id, replacing any previous record.

        Raises:
            StoreError: If the record cannot be written
        """


class SqlJobStore(JobStore):
    """JobStore backed by the ``job_state`` table.

    Each call runs in its own session from get_session(), so a write is
    committed before set() returns.
    """

    def get(self, job_id: str) -> Optional[JobRecord]:
        key = job_key(job_id)
        try:
            with get_session() as session:
                row = session.get(JobStateModel, key)
                value = row.value if row is not None else None
        except StoreError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error reading {key}: {e}", exc_info=True)
            raise StoreError(f"Failed to read job {job_id}: {e}") from e

        if value is None:
            return None

        try:
            return JobRecord.from_document(json.loads(value))
        except (ValueError, ValidationError) as e:
            logger.error(
                f"Stored record {key} is unreadable",
                extra={"event": "store.record.corrupt", "key": key, "error": str(e)},
            )
            raise CorruptRecordError(key, str(e)) from e

    def set(self, job_id: str, record: JobRecord) -> None:
        if record.job_id != job_id:
            raise ValueError(f"Record for {record.job_id} cannot be stored under {job_id}")

        key = job_key(job_id)
        value = json.dumps(record.to_document(), ensure_ascii=False)
        updated_at = utc_now().strftime("%Y-%m-%dT%H:%M:%S.%fZ")

        try:
            with get_session() as session:
                row = session.get(JobStateModel, key)
                if row is None:
                    session.add(JobStateModel(key=key, value=value, updated_at=updated_at))
                else:
                    row.value = value
                    row.updated_at = updated_at
        except StoreError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error writing {key}: {e}", exc_info=True)
            raise StoreError(f"Failed to write job {job_id}: {e}") from e

        logger.debug(
            f"Stored {key}",
            extra={"event": "store.record.written", "key": key, "status": record.status.value},
        )
