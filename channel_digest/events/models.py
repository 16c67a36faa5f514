"""Event topics and their payload models.

Every topic is bound to exactly one payload model. EventBus.emit() refuses a
payload whose type does not match its topic, and handlers parse the delivered
message back with ``topic.payload_type``.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from channel_digest.domain.models import Item


class EventPayload(BaseModel):
    """Base class for bus payloads."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    job_id: str = Field(..., alias="jobID", min_length=1)
    email: str = Field(..., min_length=1)

    def to_message(self) -> Dict[str, Any]:
        """Serialize to the wire message handed to subscribers."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SubmissionAccepted(EventPayload):
    """A job was created and waits for channel resolution."""

    channel: str


class ChannelResolved(EventPayload):
    channel_id: str = Field(..., alias="channelID", min_length=1)
    channel_name: str = Field("", alias="channelName")


class ChannelResolutionFailed(EventPayload):
    """Resolution ended the job.

    ``error`` is omitted when the channel was simply not found and set when
    resolution failed unexpectedly.
    """

    error: Optional[str] = None


class ItemsListed(EventPayload):
    items: List[Item] = Field(..., min_length=1)
    channel_name: str = Field("", alias="channelName")


class ItemListingFailed(EventPayload):
    error: str


class Topic(str, Enum):
    """Named channels of the event bus."""

    SUBMISSION_ACCEPTED = "submission-accepted"
    RESOLUTION_SUCCEEDED = "resolution-succeeded"
    RESOLUTION_ERROR = "resolution-error"
    LISTING_SUCCEEDED = "listing-succeeded"
    LISTING_ERROR = "listing-error"

    @property
    def payload_type(self) -> Type[EventPayload]:
        return TOPIC_PAYLOADS[self]


TOPIC_PAYLOADS: Dict[Topic, Type[EventPayload]] = {
    Topic.SUBMISSION_ACCEPTED: SubmissionAccepted,
    Topic.RESOLUTION_SUCCEEDED: ChannelResolved,
    Topic.RESOLUTION_ERROR: ChannelResolutionFailed,
    Topic.LISTING_SUCCEEDED: ItemsListed,
    Topic.LISTING_ERROR: ItemListingFailed,
}

# Topics that end a job; consumed by the downstream notifier
TERMINAL_TOPICS = (Topic.RESOLUTION_ERROR, Topic.LISTING_SUCCEEDED, Topic.LISTING_ERROR)
