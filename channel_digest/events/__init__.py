"""Event topics, payloads and the in-process event bus."""

from .bus import EventBus, Handler, Message
from .exceptions import DuplicateSubscriptionError, EventBusError, PayloadMismatchError
from .models import (
    TERMINAL_TOPICS,
    TOPIC_PAYLOADS,
    ChannelResolutionFailed,
    ChannelResolved,
    EventPayload,
    ItemListingFailed,
    ItemsListed,
    SubmissionAccepted,
    Topic,
)

__all__ = [
    # Bus
    "EventBus",
    "Handler",
    "Message",
    # Topics and payloads
    "Topic",
    "TOPIC_PAYLOADS",
    "TERMINAL_TOPICS",
    "EventPayload",
    "SubmissionAccepted",
    "ChannelResolved",
    "ChannelResolutionFailed",
    "ItemsListed",
    "ItemListingFailed",
    # Exceptions
    "EventBusError",
    "DuplicateSubscriptionError",
    "PayloadMismatchError",
]
