"""Job pipeline: submission, channel resolution and item listing stages."""

from .base import BaseStage
from .exceptions import (
    ChannelNotFoundError,
    ConfigError,
    JobNotFoundError,
    MalformedPayloadError,
    NoItemsFoundError,
    NotFoundError,
    PipelineError,
    SubmissionValidationError,
    TransientError,
)
from .listing import ItemListingStage, newest_first
from .models import SubmissionResponse
from .resolution import ChannelResolutionStage, parse_handle
from .runner import JobPipeline
from .submission import SubmissionStage, validate_submission

__all__ = [
    "JobPipeline",
    "BaseStage",
    "SubmissionStage",
    "ChannelResolutionStage",
    "ItemListingStage",
    "SubmissionResponse",
    "validate_submission",
    "parse_handle",
    "newest_first",
    "PipelineError",
    "SubmissionValidationError",
    "MalformedPayloadError",
    "ConfigError",
    "NotFoundError",
    "JobNotFoundError",
    "ChannelNotFoundError",
    "NoItemsFoundError",
    "TransientError",
]
