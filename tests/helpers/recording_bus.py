"""Synchronous bus double that records emitted messages instead of delivering them."""

from typing import Dict, List, Tuple

from channel_digest.events.bus import Handler, Message
from channel_digest.events.exceptions import EventBusError, PayloadMismatchError
from channel_digest.events.models import EventPayload, Topic


class RecordingBus:
    """Drop-in replacement for EventBus in stage tests.

    emit() applies the same payload checks as EventBus and appends
    ``(topic, message)`` to ``emitted``. Nothing is delivered, so every stage
    can be exercised in isolation.

    Attributes:
        emitted: Recorded (topic, message) pairs in emission order
        refuse: When True, emit() raises EventBusError like a shut-down bus
    """

    def __init__(self, refuse: bool = False):
        self.emitted: List[Tuple[Topic, Message]] = []
        self.handlers: Dict[Topic, Handler] = {}
        self.refuse = refuse

    def subscribe(self, topic: Topic, handler: Handler) -> None:
        self.handlers[Topic(topic)] = handler

    def emit(self, topic: Topic, payload: EventPayload) -> None:
        topic = Topic(topic)
        if not isinstance(payload, topic.payload_type):
            raise PayloadMismatchError(
                topic.value, topic.payload_type.__name__, type(payload).__name__
            )
        if self.refuse:
            raise EventBusError(f"Event bus is shut down; refused message for {topic.value}")
        self.emitted.append((topic, payload.to_message()))

    def messages(self, topic: Topic) -> List[Message]:
        """Messages emitted on topic."""
        return [message for emitted_topic, message in self.emitted if emitted_topic is topic]

    @property
    def topics(self) -> List[Topic]:
        return [topic for topic, _ in self.emitted]
