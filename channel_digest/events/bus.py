"""In-process event bus delivering topic messages on a worker thread pool."""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from channel_digest.logging import get_logger
from channel_digest.logging.context import log_context

from .exceptions import DuplicateSubscriptionError, EventBusError, PayloadMismatchError
from .models import EventPayload, Topic

logger = get_logger(__name__, component="bus")

Message = Dict[str, Any]
Handler = Callable[[Message], None]


class EventBus:
    """
    Topic-based publish/subscribe with one handler per topic.

    emit() is a one-way send: it validates the payload against the topic,
    serializes it to a wire message and schedules delivery, then returns
    without waiting for the handler. Handlers run on a thread pool; messages
    for different jobs may be handled concurrently and in any order. A handler
    exception is logged and never reaches the emitter.

    Handlers receive the serialized message (a plain dict), not the payload
    object, so every handler has to cope with whatever arrives on its topic.
    """

    def __init__(self, worker_count: int = 4) -> None:
        """
        Initialize the bus.

        Args:
            worker_count: Number of threads delivering messages
        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got: {worker_count}")

        self.worker_count = worker_count
        self._handlers: Dict[Topic, Handler] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=worker_count, thread_name_prefix="event-bus"
        )
        self._pending = 0
        self._idle = threading.Condition()
        self._closed = False

    def subscribe(self, topic: Topic, handler: Handler) -> None:
        """Register the single handler of a topic.

        Raises:
            DuplicateSubscriptionError: If the topic already has a handler
        """
        topic = Topic(topic)
        with self._idle:
            if topic in self._handlers:
                raise DuplicateSubscriptionError(topic.value)
            self._handlers[topic] = handler

        logger.debug(
            f"Subscribed handler to {topic.value}",
            extra={
                "event": "bus.subscribed",
                "topic": topic.value,
                "handler": getattr(handler, "__qualname__", repr(handler)),
            },
        )

    def has_subscriber(self, topic: Topic) -> bool:
        return Topic(topic) in self._handlers

    def emit(self, topic: Topic, payload: EventPayload) -> None:
        """Accept a message for delivery.

        Args:
            topic: Destination topic
            payload: Payload instance of the topic's bound payload type

        Raises:
            PayloadMismatchError: If payload is not of topic.payload_type
            EventBusError: If the bus has been shut down
        """
        topic = Topic(topic)
        expected = topic.payload_type
        if not isinstance(payload, expected):
            raise PayloadMismatchError(
                topic.value, expected.__name__, type(payload).__name__
            )

        message = payload.to_message()

        with self._idle:
            if self._closed:
                raise EventBusError(f"Event bus is shut down; refused message for {topic.value}")

            handler = self._handlers.get(topic)
            if handler is None:
                logger.debug(
                    f"No subscriber for {topic.value}, message dropped",
                    extra={"event": "bus.unsubscribed_topic", "topic": topic.value, "job_id": payload.job_id},
                )
                return

            self._pending += 1

        try:
            self._executor.submit(self._deliver, topic, handler, message)
        except RuntimeError as e:
            self._settle()
            raise EventBusError(f"Event bus refused message for {topic.value}: {e}") from e

        logger.debug(
            f"Accepted message for {topic.value}",
            extra={"event": "bus.message.accepted", "topic": topic.value, "job_id": payload.job_id},
        )

    def _deliver(self, topic: Topic, handler: Handler, message: Message) -> None:
        with log_context(topic=topic.value):
            try:
                handler(message)
            except Exception as e:
                logger.error(
                    f"Handler for {topic.value} raised: {e}",
                    extra={
                        "event": "bus.delivery.failed",
                        "error_type": type(e).__name__,
                        "error": str(e),
                        "job_id": message.get("jobID"),
                    },
                    exc_info=True,
                )
            finally:
                self._settle()

    def _settle(self) -> None:
        with self._idle:
            self._pending -= 1
            if self._pending == 0:
                self._idle.notify_all()

    @property
    def pending(self) -> int:
        """Number of accepted messages whose handler has not finished."""
        with self._idle:
            return self._pending

    def join(self, timeout: Optional[float] = None) -> bool:
        """Block until every accepted message has been handled.

        Messages emitted by handlers while joining are waited for as well, so
        a join after a submission returns once the whole job chain has run.

        Args:
            timeout: Maximum seconds to wait (None = no limit)

        Returns:
            True if the bus went idle, False on timeout
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting messages and release the worker threads.

        Args:
            wait: If True, wait for in-flight deliveries to finish
        """
        with self._idle:
            if self._closed:
                return
            self._closed = True

        logger.info(
            "Shutting down event bus",
            extra={"event": "bus.stopping", "pending": self.pending, "wait": wait},
        )
        self._executor.shutdown(wait=wait)
