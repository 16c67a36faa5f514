"""Shared behaviour of the event-triggered pipeline stages."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Tuple, TypeVar

from pydantic import ValidationError

from channel_digest.adapters.base import BaseAdapter
from channel_digest.adapters.exceptions import AdapterError
from channel_digest.config.models import PipelineConfig
from channel_digest.domain.exceptions import InvalidTransitionError
from channel_digest.domain.models import JobRecord, JobStatus
from channel_digest.events.bus import EventBus, Message
from channel_digest.events.exceptions import EventBusError
from channel_digest.events.models import EventPayload, Topic
from channel_digest.logging import get_logger
from channel_digest.logging.context import job_log_context
from channel_digest.persistence.exceptions import StoreError
from channel_digest.persistence.store import JobStore

from .exceptions import (
    ConfigError,
    JobNotFoundError,
    MalformedPayloadError,
    PipelineError,
    TransientError,
)

T = TypeVar("T")

logger = get_logger(__name__, component="pipeline")


class BaseStage(ABC):
    """
    One pipeline step: consumes a trigger topic, advances the job record and
    emits either the next trigger or the stage's error topic.

    handle() is the bus handler. It runs in this order:

    1. Identity guard: a message without ``jobID`` or ``email`` is logged and
       dropped; nothing is written and nothing is emitted.
    2. Parse the message with the trigger topic's payload model.
    3. Require the API credential.
    4. Load the record. A missing record is a failure. A record that is
       terminal, or already at or past ENTRY_STATUS, has been claimed by an
       earlier delivery; the message is a stale redelivery and is ignored.
    5. Run the stage's process().

    Any exception from steps 2-5 fails the job (see _fail_job).
    """

    STAGE_NAME = "stage"
    TRIGGER: Topic
    ERROR_TOPIC: Topic
    # Status the stage moves a job into when it claims it
    ENTRY_STATUS: JobStatus

    def __init__(
        self,
        store: JobStore,
        bus: EventBus,
        adapter: BaseAdapter,
        api_key: Optional[str],
        settings: Optional[PipelineConfig] = None,
    ) -> None:
        """
        Initialize the stage.

        Args:
            store: Job store
            bus: Event bus used for emissions
            adapter: Platform adapter providing search and listing
            api_key: API credential; None or empty fails every job
            settings: Pipeline settings (defaults if None)
        """
        self.store = store
        self.bus = bus
        self.adapter = adapter
        self.api_key = api_key or None
        self.settings = settings or PipelineConfig()

    def handle(self, message: Message) -> None:
        """Bus handler for the trigger topic. Never raises for job-level failures."""
        job_id, email = self._identity(message)
        if job_id is None or email is None:
            logger.warning(
                f"Dropping {self.TRIGGER.value} message without job identity",
                extra={
                    "event": f"{self.STAGE_NAME}.message.dropped",
                    "stage": self.STAGE_NAME,
                    "has_job_id": job_id is not None,
                    "has_email": email is not None,
                },
            )
            return

        with job_log_context(job_id, self.STAGE_NAME):
            try:
                payload = self._parse(message)
                self._require_api_key()
                record = self._load(job_id)
                if record is None:
                    return
                self.process(payload, record)
            except Exception as e:
                self._fail_job(job_id, email, e)

    @abstractmethod
    def process(self, payload: Any, record: JobRecord) -> None:
        """Do the stage's work for a loaded, current job record."""

    @abstractmethod
    def failure_payload(self, job_id: str, email: str, error: Exception) -> EventPayload:
        """Build the error-topic payload announcing that error ended the job."""

    @staticmethod
    def _identity(message: Any) -> Tuple[Optional[str], Optional[str]]:
        if not isinstance(message, dict):
            return None, None

        def text(key: str) -> Optional[str]:
            value = message.get(key)
            if isinstance(value, str) and value.strip():
                return value
            return None

        return text("jobID"), text("email")

    def _parse(self, message: Message):
        try:
            return self.TRIGGER.payload_type.model_validate(message)
        except ValidationError as e:
            raise MalformedPayloadError(
                f"Malformed {self.TRIGGER.value} payload: {e.error_count()} validation error(s)"
            ) from e

    def _require_api_key(self) -> None:
        if not self.api_key:
            raise ConfigError("YOUTUBE_API_KEY is not configured")

    def _load(self, job_id: str) -> Optional[JobRecord]:
        """Return the record to work on, or None for a stale redelivery.

        Raises:
            JobNotFoundError: If no record exists for job_id
            StoreError: If the store cannot be read
        """
        record = self.store.get(job_id)
        if record is None:
            raise JobNotFoundError(job_id)

        if record.status.is_terminal or record.status.rank >= self.ENTRY_STATUS.rank:
            logger.info(
                f"Ignoring stale {self.TRIGGER.value} message, job is {record.status.value}",
                extra={"event": f"{self.STAGE_NAME}.stale_redelivery", "status": record.status.value},
            )
            return None
        return record

    def _save(self, record: JobRecord) -> JobRecord:
        self.store.set(record.job_id, record)
        return record

    def _emit(self, topic: Topic, payload: EventPayload) -> None:
        self.bus.emit(topic, payload)
        logger.debug(f"Emitted {topic.value}", extra={"event": "pipeline.emitted", "topic": topic.value})

    def _call_adapter(self, description: str, func: Callable[..., T], *args: Any) -> T:
        """Run an adapter call, converting its failure into TransientError."""
        try:
            return func(*args)
        except AdapterError as e:
            raise TransientError(f"{description} failed: {e}", cause=e) from e

    def _fail_job(self, job_id: str, email: str, error: Exception) -> None:
        """Record error on the job and announce it on the error topic.

        The job record gets the plain error message; the emitted payload is
        built by failure_payload(). A missing record does not prevent the
        emission. A record that cannot be written, or that is already
        terminal, ends handling without an emission.
        """
        reason = str(error) or type(error).__name__
        logger.error(
            f"{self.STAGE_NAME} failed: {reason}",
            extra={
                "event": f"{self.STAGE_NAME}.failed",
                "error_type": type(error).__name__,
                "error": reason,
            },
            exc_info=not isinstance(error, (PipelineError, StoreError)),
        )

        try:
            record = self.store.get(job_id)
            if record is None:
                logger.warning(
                    "Job record missing while recording failure; notifying anyway",
                    extra={"event": f"{self.STAGE_NAME}.failure.record_missing"},
                )
            else:
                self._save(record.fail(reason))
        except StoreError as e:
            logger.error(
                f"Could not persist failure of job {job_id}: {e}",
                extra={"event": f"{self.STAGE_NAME}.failure.dropped", "error": str(e)},
            )
            return
        except InvalidTransitionError as e:
            logger.warning(
                f"Job {job_id} already ended, failure not recorded: {e}",
                extra={"event": f"{self.STAGE_NAME}.failure.dropped"},
            )
            return

        try:
            self._emit(self.ERROR_TOPIC, self.failure_payload(job_id, email, error))
        except EventBusError as e:
            logger.error(
                f"Could not emit {self.ERROR_TOPIC.value} for job {job_id}: {e}",
                extra={"event": f"{self.STAGE_NAME}.failure.emit_failed", "error": str(e)},
            )
