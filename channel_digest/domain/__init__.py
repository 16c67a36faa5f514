"""Domain models for jobs, items and channels."""

from .exceptions import InvalidTransitionError
from .models import ChannelCandidate, Item, JobRecord, JobStatus

__all__ = ["ChannelCandidate", "Item", "JobRecord", "JobStatus", "InvalidTransitionError"]
