"""Pipeline error taxonomy.

Stage errors never escape a stage: BaseStage converts them into a failed job
record plus an emission on the stage's error topic. Only submission errors
surface to the caller, as a 400 response.
"""


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    pass


class SubmissionValidationError(PipelineError):
    """Ingress input was rejected; nothing was written or emitted."""

    pass


class MalformedPayloadError(PipelineError):
    """A delivered message did not match its topic's payload model."""

    pass


class ConfigError(PipelineError):
    """A stage is missing configuration it needs, e.g. the API credential."""

    pass


class NotFoundError(PipelineError):
    """Something a stage looked up does not exist."""

    pass


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: str) -> None:
        super().__init__("Job not found")
        self.job_id = job_id


class ChannelNotFoundError(NotFoundError):
    def __init__(self, channel: str) -> None:
        super().__init__("Channel not found")
        self.channel = channel


class NoItemsFoundError(NotFoundError):
    def __init__(self, channel_id: str) -> None:
        super().__init__("No videos found for channel")
        self.channel_id = channel_id


class TransientError(PipelineError):
    """An external call failed after the retry policy gave up.

    Attributes:
        cause: The adapter exception of the last attempt
    """

    def __init__(self, message: str, cause: Exception) -> None:
        super().__init__(message)
        self.cause = cause
