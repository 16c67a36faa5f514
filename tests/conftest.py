"""Shared pytest fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from channel_digest.adapters.retry import NO_RETRY
from channel_digest.config.models import PipelineConfig
from channel_digest.domain.models import ChannelCandidate, Item
from channel_digest.logging.context import clear_log_context
from channel_digest.persistence import SqlJobStore, close_database, init_database

from tests.helpers import FixtureYouTubeAdapter, RecordingBus

FIXTURES_DIR = Path(__file__).parent / "fixtures"
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_log_context():
    """Keep log context from leaking between tests."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def memory_database():
    """Initialize an in-memory job store database."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def store(memory_database):
    return SqlJobStore()


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def pipeline_config():
    return PipelineConfig()


@pytest.fixture
def make_item():
    """Factory for items published ``hours`` after a fixed base time."""

    def _make(item_id: str, hours: int = 0, **overrides) -> Item:
        data = {
            "item_id": item_id,
            "title": f"Video {item_id}",
            "url": f"https://www.youtube.com/watch?v={item_id}",
            "published_at": BASE_TIME + timedelta(hours=hours),
        }
        data.update(overrides)
        return Item(**data)

    return _make


@pytest.fixture
def acme_adapter(make_item):
    """Adapter resolving ``acme`` to UC123 with three items."""
    return FixtureYouTubeAdapter(
        channels={"acme": [ChannelCandidate(channel_id="UC123", channel_name="Acme")]},
        items={"UC123": [make_item("a", 1), make_item("b", 3), make_item("c", 2)]},
        retry_policy=NO_RETRY,
    )


@pytest.fixture
def youtube_fixture_path():
    return FIXTURES_DIR / "youtube.yaml"
