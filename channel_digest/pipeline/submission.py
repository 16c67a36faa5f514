"""Submission stage: validates a request, creates the job and starts the pipeline."""

from typing import Any, Callable, Tuple

from email_validator import EmailNotValidError, validate_email

from channel_digest.domain.models import JobRecord
from channel_digest.events.bus import EventBus
from channel_digest.events.exceptions import EventBusError
from channel_digest.events.models import SubmissionAccepted, Topic
from channel_digest.logging import get_logger
from channel_digest.logging.context import job_log_context
from channel_digest.persistence.exceptions import StoreError
from channel_digest.persistence.store import JobStore
from channel_digest.utils.identifiers import generate_job_id

from .exceptions import SubmissionValidationError
from .models import SubmissionResponse

logger = get_logger(__name__, component="pipeline")

ACCEPTED_MESSAGE = "Job submitted successfully. You will get an email soon."
MISSING_FIELDS_MESSAGE = "Channel and email are required"
INVALID_EMAIL_MESSAGE = "Invalid email format"


def validate_submission(body: Any) -> Tuple[str, str]:
    """Extract and validate ``channel`` and ``email`` from a request body.

    A body that is not a JSON object is treated as empty. Values are used as
    submitted; only the email syntax is checked, never its deliverability.
    Special-use domains such as ``.local`` or ``.test`` count as invalid.

    Returns:
        (channel, email)

    Raises:
        SubmissionValidationError: With the message returned to the client
    """
    if not isinstance(body, dict):
        body = {}

    channel = body.get("channel")
    email = body.get("email")
    if not _present(channel) or not _present(email):
        raise SubmissionValidationError(MISSING_FIELDS_MESSAGE)

    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise SubmissionValidationError(INVALID_EMAIL_MESSAGE) from e

    return channel, email


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class SubmissionStage:
    """
    Entry point of the pipeline.

    submit() never raises: every outcome, including infrastructure failures,
    is returned as a SubmissionResponse.
    """

    def __init__(
        self,
        store: JobStore,
        bus: EventBus,
        id_factory: Callable[[], str] = generate_job_id,
    ) -> None:
        self.store = store
        self.bus = bus
        self.id_factory = id_factory

    def submit(self, body: Any) -> SubmissionResponse:
        """
        Handle one submission.

        On success the job is stored as ``queued`` and ``submission-accepted``
        is emitted before the 201 response is returned. When the emit is
        refused the stored record stays ``queued`` and the caller gets a 500.

        Args:
            body: Decoded JSON request body

        Returns:
            SubmissionResponse with status 201, 400 or 500
        """
        try:
            channel, email = validate_submission(body)
        except SubmissionValidationError as e:
            logger.info(
                f"Submission rejected: {e}",
                extra={"event": "submission.rejected", "reason": str(e)},
            )
            return SubmissionResponse.bad_request(str(e))

        job_id = self.id_factory()
        with job_log_context(job_id, "submission"):
            try:
                self.store.set(job_id, JobRecord.new(job_id, channel, email))
                self.bus.emit(
                    Topic.SUBMISSION_ACCEPTED,
                    SubmissionAccepted(job_id=job_id, email=email, channel=channel),
                )
            except (StoreError, EventBusError) as e:
                logger.error(
                    f"Submission failed: {e}",
                    extra={"event": "submission.failed", "error_type": type(e).__name__, "error": str(e)},
                )
                return SubmissionResponse.internal_error()

            logger.info(
                "Job submitted",
                extra={"event": "submission.accepted", "channel": channel},
            )

        return SubmissionResponse(
            status_code=201,
            body={"success": True, "jobID": job_id, "message": ACCEPTED_MESSAGE},
        )
