"""Item listing stage: fetches the most recent videos of a resolved channel."""

from typing import List

from channel_digest.domain.models import Item, JobRecord, JobStatus
from channel_digest.events.models import ChannelResolved, ItemListingFailed, ItemsListed, Topic
from channel_digest.logging import get_logger

from .base import BaseStage
from .exceptions import NoItemsFoundError

logger = get_logger(__name__, component="pipeline")


def newest_first(items: List[Item], limit: int) -> List[Item]:
    """Order items by publish time, newest first, and keep at most limit."""
    return sorted(items, key=lambda item: item.published_at, reverse=True)[:limit]


class ItemListingStage(BaseStage):
    """
    Lists the recent items of a job's resolved channel.

    Triggered by ``resolution-succeeded``. Moves the job to
    ``fetching-items`` and requests ``pipeline.page_size`` items. The result
    is re-sorted and truncated here, whatever order and count the adapter
    returned. A channel without items fails the job.
    """

    STAGE_NAME = "listing"
    TRIGGER = Topic.RESOLUTION_SUCCEEDED
    ERROR_TOPIC = Topic.LISTING_ERROR
    ENTRY_STATUS = JobStatus.FETCHING_ITEMS

    def process(self, payload: ChannelResolved, record: JobRecord) -> None:
        page_size = self.settings.page_size
        logger.info(
            f"Fetching up to {page_size} items",
            extra={"event": "listing.started", "channel_id": payload.channel_id},
        )
        record = self._save(record.advance(JobStatus.FETCHING_ITEMS))

        fetched = self._call_adapter(
            "Video listing",
            self.adapter.list_recent_items,
            payload.channel_id,
            self.api_key,
            page_size,
        )
        items = newest_first(fetched, page_size)
        if not items:
            raise NoItemsFoundError(payload.channel_id)

        channel_name = payload.channel_name or record.channel_name or ""
        record = self._save(record.advance(JobStatus.ITEMS_FETCHED, items=items))
        self._emit(
            Topic.LISTING_SUCCEEDED,
            ItemsListed(
                job_id=record.job_id,
                email=payload.email,
                items=items,
                channel_name=channel_name,
            ),
        )
        logger.info(
            f"Fetched {len(items)} items",
            extra={"event": "listing.succeeded", "item_count": len(items), "fetched_count": len(fetched)},
        )

    def failure_payload(self, job_id: str, email: str, error: Exception) -> ItemListingFailed:
        if isinstance(error, NoItemsFoundError):
            message = str(error)
        else:
            message = f"Failed to fetch videos: {error}"
        return ItemListingFailed(job_id=job_id, email=email, error=message)
