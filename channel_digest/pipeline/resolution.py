"""Channel resolution stage: turns a submitted channel reference into a channel id."""

from typing import List, Optional

from channel_digest.domain.models import ChannelCandidate, JobRecord, JobStatus
from channel_digest.events.models import (
    ChannelResolutionFailed,
    ChannelResolved,
    SubmissionAccepted,
    Topic,
)
from channel_digest.logging import get_logger

from .base import BaseStage
from .exceptions import ChannelNotFoundError

logger = get_logger(__name__, component="pipeline")

HANDLE_PREFIX = "@"


def parse_handle(channel: str) -> Optional[str]:
    """Return the handle text of an ``@handle`` reference, or None for anything else.

    >>> parse_handle("@acme")
    'acme'
    >>> parse_handle("acme") is None
    True
    """
    if not channel.startswith(HANDLE_PREFIX):
        return None
    handle = channel[len(HANDLE_PREFIX):]
    return handle if handle.strip() else None


class ChannelResolutionStage(BaseStage):
    """
    Resolves the channel of a queued job.

    Triggered by ``submission-accepted``. Moves the job to
    ``resolving-channel``, searches the handle text and takes the first
    candidate. When the handle search finds nothing, a second search with the
    channel text as submitted is made; its result is only used when
    ``pipeline.apply_fallback_result`` is enabled. On success the channel id
    and name are stored on the job and ``resolution-succeeded`` is emitted.
    """

    STAGE_NAME = "resolution"
    TRIGGER = Topic.SUBMISSION_ACCEPTED
    ERROR_TOPIC = Topic.RESOLUTION_ERROR
    ENTRY_STATUS = JobStatus.RESOLVING_CHANNEL

    def process(self, payload: SubmissionAccepted, record: JobRecord) -> None:
        logger.info(
            "Resolving channel",
            extra={"event": "resolution.started", "channel": payload.channel},
        )
        record = self._save(record.advance(JobStatus.RESOLVING_CHANNEL))

        candidate = self.resolve(payload.channel)
        if candidate is None:
            raise ChannelNotFoundError(payload.channel)

        record = self._save(
            record.advance(
                JobStatus.RESOLVING_CHANNEL,
                channel_id=candidate.channel_id,
                channel_name=candidate.channel_name,
            )
        )
        self._emit(
            Topic.RESOLUTION_SUCCEEDED,
            ChannelResolved(
                job_id=record.job_id,
                email=payload.email,
                channel_id=candidate.channel_id,
                channel_name=candidate.channel_name,
            ),
        )
        logger.info(
            f"Resolved channel {payload.channel} to {candidate.channel_id}",
            extra={
                "event": "resolution.succeeded",
                "channel_id": candidate.channel_id,
                "channel_name": candidate.channel_name,
            },
        )

    def resolve(self, channel: str) -> Optional[ChannelCandidate]:
        """Find the channel a reference points to, or None."""
        handle = parse_handle(channel)
        if handle is None:
            logger.warning(
                f"Channel reference {channel!r} is not a handle",
                extra={"event": "resolution.not_a_handle", "channel": channel},
            )
            return None

        candidates = self._search(handle)
        if candidates:
            return candidates[0]

        fallback = self._search(channel)
        if not fallback:
            return None

        if not self.settings.apply_fallback_result:
            logger.info(
                "Fallback search found a channel but fallback results are disabled",
                extra={
                    "event": "resolution.fallback.discarded",
                    "channel_id": fallback[0].channel_id,
                },
            )
            return None

        logger.info(
            "Using fallback search result",
            extra={"event": "resolution.fallback.applied", "channel_id": fallback[0].channel_id},
        )
        return fallback[0]

    def _search(self, query: str) -> List[ChannelCandidate]:
        return self._call_adapter(
            "Channel search", self.adapter.search_channels, query, self.api_key
        )

    def failure_payload(self, job_id: str, email: str, error: Exception) -> ChannelResolutionFailed:
        if isinstance(error, ChannelNotFoundError):
            return ChannelResolutionFailed(job_id=job_id, email=email)
        return ChannelResolutionFailed(
            job_id=job_id, email=email, error=f"Failed to resolve channel: {error}"
        )
