"""Pipeline assembly: wires the stages to the event bus."""

from typing import Callable, Optional

from channel_digest.adapters.base import BaseAdapter
from channel_digest.config.environment import EnvironmentConfig
from channel_digest.config.models import AppConfig
from channel_digest.events.bus import EventBus, Message
from channel_digest.events.models import TERMINAL_TOPICS
from channel_digest.logging import get_logger
from channel_digest.persistence.store import JobStore

from .listing import ItemListingStage
from .resolution import ChannelResolutionStage
from .submission import SubmissionStage

logger = get_logger(__name__, component="pipeline")

OutcomeHandler = Callable[[Message], None]


class JobPipeline:
    """
    The three stages of a job, sharing one store, bus and adapter.

    Submission runs synchronously in the caller's thread; resolution and
    listing run on the bus workers once register() has subscribed them.
    Messages on the terminal topics go to outcome_handler when one is given,
    standing in for the downstream notifier.
    """

    def __init__(
        self,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        bus: EventBus,
        store: JobStore,
        adapter: BaseAdapter,
        outcome_handler: Optional[OutcomeHandler] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            app_config: Application configuration
            env_config: Environment configuration (provides the API key)
            bus: Event bus connecting the stages
            store: Job store
            adapter: Platform adapter
            outcome_handler: Optional subscriber for the terminal topics
        """
        self.app_config = app_config
        self.bus = bus
        self.store = store
        self.outcome_handler = outcome_handler

        api_key = env_config.youtube_api_key
        self.submission = SubmissionStage(store, bus)
        self.resolution = ChannelResolutionStage(store, bus, adapter, api_key, app_config.pipeline)
        self.listing = ItemListingStage(store, bus, adapter, api_key, app_config.pipeline)
        self._registered = False

    def register(self) -> None:
        """Subscribe the stages (and the outcome handler) to their topics. Idempotent."""
        if self._registered:
            return

        for stage in (self.resolution, self.listing):
            self.bus.subscribe(stage.TRIGGER, stage.handle)

        if self.outcome_handler is not None:
            for topic in TERMINAL_TOPICS:
                self.bus.subscribe(topic, self.outcome_handler)

        self._registered = True
        logger.info(
            "Pipeline registered",
            extra={
                "event": "pipeline.registered",
                "page_size": self.app_config.pipeline.page_size,
                "apply_fallback_result": self.app_config.pipeline.apply_fallback_result,
                "has_api_key": bool(self.resolution.api_key),
            },
        )
