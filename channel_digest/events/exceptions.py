"""Custom exceptions for the event bus."""


class EventBusError(Exception):
    """Base exception for event bus errors.

    Raised directly when the bus refuses a message, e.g. after shutdown.
    """

    pass


class DuplicateSubscriptionError(EventBusError):
    """A second handler was subscribed to a topic that already has one."""

    def __init__(self, topic: str) -> None:
        super().__init__(f"Topic '{topic}' already has a subscriber")
        self.topic = topic


class PayloadMismatchError(EventBusError):
    """The payload type emitted does not match the topic's bound payload type."""

    def __init__(self, topic: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Topic '{topic}' carries {expected} payloads, got {actual}"
        )
        self.topic = topic
        self.expected = expected
        self.actual = actual
