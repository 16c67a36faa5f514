"""Core domain models: job records, listed items and channel candidates.

Models use snake_case attributes and carry the wire names (``jobID``,
``channelName``, ``publishedAt``, ...) as aliases. Persisted documents and
event messages are always produced with ``by_alias=True`` so stored records
and bus payloads share one field vocabulary.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from channel_digest.utils.timestamps import ensure_utc, utc_now

from .exceptions import InvalidTransitionError


class JobStatus(str, Enum):
    """Lifecycle status of a job. Values only ever move forward."""

    QUEUED = "queued"
    RESOLVING_CHANNEL = "resolving-channel"
    FETCHING_ITEMS = "fetching-items"
    ITEMS_FETCHED = "items-fetched"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.ITEMS_FETCHED, JobStatus.FAILED)

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    JobStatus.QUEUED: 0,
    JobStatus.RESOLVING_CHANNEL: 1,
    JobStatus.FETCHING_ITEMS: 2,
    JobStatus.ITEMS_FETCHED: 3,
    JobStatus.FAILED: 3,
}


class Item(BaseModel):
    """A recently published item (video) of a channel."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    item_id: str = Field(..., alias="itemID", min_length=1)
    title: str
    url: str = Field(..., min_length=1)
    published_at: datetime = Field(..., alias="publishedAt")
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailURL")

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ChannelCandidate(BaseModel):
    """A channel returned by the search capability."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    channel_id: str = Field(..., alias="channelID", min_length=1)
    channel_name: str = Field("", alias="channelName")


class JobRecord(BaseModel):
    """Persisted state of one job.

    Invariants checked on every construction:
    - ``error`` is set if and only if the status is ``failed``
    - ``items`` is set (and non-empty) if and only if the status is ``items-fetched``

    Stages never mutate a record; they derive the next one with advance().
    """

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobID", min_length=1)
    channel: str
    email: str
    status: JobStatus = JobStatus.QUEUED
    error: Optional[str] = None
    channel_id: Optional[str] = Field(None, alias="channelID")
    channel_name: Optional[str] = Field(None, alias="channelName")
    items: Optional[List[Item]] = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_status_fields(self):
        is_failed = self.status is JobStatus.FAILED
        if is_failed != (self.error is not None):
            raise ValueError("error must be set if and only if status is 'failed'")

        is_fetched = self.status is JobStatus.ITEMS_FETCHED
        if is_fetched != (self.items is not None):
            raise ValueError("items must be set if and only if status is 'items-fetched'")

        if self.items is not None and not self.items:
            raise ValueError("items must contain at least one item")

        return self

    @classmethod
    def new(cls, job_id: str, channel: str, email: str, created_at: Optional[datetime] = None) -> "JobRecord":
        """Create the initial ``queued`` record for a submission."""
        return cls(
            job_id=job_id,
            channel=channel,
            email=email,
            status=JobStatus.QUEUED,
            created_at=created_at or utc_now(),
        )

    def advance(self, status: JobStatus, **changes: Any) -> "JobRecord":
        """Return a copy moved to ``status`` with ``changes`` applied.

        Staying on the current status is allowed (e.g. recording the resolved
        channel while still ``resolving-channel``). ``failed`` is reachable
        from every non-terminal status.

        Raises:
            InvalidTransitionError: If the record is terminal, the move goes
                backward, or the resulting record violates an invariant
        """
        if self.status.is_terminal:
            raise InvalidTransitionError(
                f"Job {self.job_id} is already {self.status.value}; cannot move to {status.value}"
            )
        if status is not JobStatus.FAILED and status.rank < self.status.rank:
            raise InvalidTransitionError(
                f"Job {self.job_id} cannot move back from {self.status.value} to {status.value}"
            )

        data = self.model_dump()
        data.update(changes)
        data["status"] = status

        try:
            return JobRecord.model_validate(data)
        except ValidationError as e:
            raise InvalidTransitionError(
                f"Job {self.job_id} cannot move to {status.value}: {e}"
            ) from e

    def fail(self, error: str) -> "JobRecord":
        """Shortcut for ``advance(JobStatus.FAILED, error=error)``."""
        return self.advance(JobStatus.FAILED, error=error or "Unknown error")

    def to_document(self) -> Dict[str, Any]:
        """Serialize with wire field names; unset optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "JobRecord":
        return cls.model_validate(document)
