"""Unit tests for the item listing stage."""

import pytest

from channel_digest.adapters import AdapterTimeoutError
from channel_digest.config.models import PipelineConfig
from channel_digest.domain.models import JobRecord, JobStatus
from channel_digest.events.models import Topic
from channel_digest.pipeline import ItemListingStage, newest_first

from tests.helpers import FixtureYouTubeAdapter

JOB_ID = "job_1714564800000_abc1234"
EMAIL = "viewer@example.com"


def resolved_message(**overrides):
    message = {"jobID": JOB_ID, "email": EMAIL, "channelID": "UC123", "channelName": "Acme"}
    message.update(overrides)
    return message


@pytest.fixture
def resolving(store):
    """Store a job that has just been resolved to UC123."""
    record = JobRecord.new(JOB_ID, "@acme", EMAIL).advance(
        JobStatus.RESOLVING_CHANNEL, channel_id="UC123", channel_name="Acme"
    )
    store.set(JOB_ID, record)
    return record


@pytest.fixture
def make_stage(store, bus):
    def _make(adapter, api_key="KEY", settings=None):
        return ItemListingStage(store, bus, adapter, api_key, settings)

    return _make


class TestNewestFirst:
    def test_sorts_and_truncates(self, make_item):
        items = [make_item("a", 1), make_item("b", 5), make_item("c", 3)]
        assert [i.item_id for i in newest_first(items, 2)] == ["b", "c"]


class TestListingSuccess:
    """Tests for the successful listing path."""

    def test_items_listed(self, make_stage, resolving, store, bus, acme_adapter):
        make_stage(acme_adapter).handle(resolved_message())

        record = store.get(JOB_ID)
        assert record.status is JobStatus.ITEMS_FETCHED
        assert [i.item_id for i in record.items] == ["b", "c", "a"]
        assert record.channel_id == "UC123"

        (topic, message), = bus.emitted
        assert topic is Topic.LISTING_SUCCEEDED
        assert message["jobID"] == JOB_ID
        assert message["email"] == EMAIL
        assert message["channelName"] == "Acme"
        assert [i["itemID"] for i in message["items"]] == ["b", "c", "a"]
        assert acme_adapter.calls == [("list_recent_items", "UC123")]

    def test_seven_items_truncated_to_five(self, make_stage, resolving, store, make_item):
        """Test the stage keeps the five newest items regardless of adapter output."""
        items = [make_item(f"v{hours}", hours) for hours in (3, 7, 1, 6, 2, 5, 4)]
        adapter = FixtureYouTubeAdapter(items={"UC123": items})

        make_stage(adapter).handle(resolved_message())

        record = store.get(JOB_ID)
        assert [i.item_id for i in record.items] == ["v7", "v6", "v5", "v4", "v3"]
        published = [i.published_at for i in record.items]
        assert published == sorted(published, reverse=True)

    def test_page_size_setting(self, make_stage, resolving, store, acme_adapter):
        make_stage(acme_adapter, settings=PipelineConfig(page_size=1)).handle(resolved_message())

        assert [i.item_id for i in store.get(JOB_ID).items] == ["b"]

    def test_status_persisted_before_listing(self, make_stage, resolving, store, make_item):
        seen = []

        class ObservingAdapter(FixtureYouTubeAdapter):
            def list_recent_items(self, channel_id, api_key, limit):
                seen.append((store.get(JOB_ID).status, limit))
                return [make_item("a")]

        make_stage(ObservingAdapter()).handle(resolved_message())

        assert seen == [(JobStatus.FETCHING_ITEMS, 5)]


class TestListingFailures:
    """Tests for failure handling in the listing stage."""

    def test_no_items(self, make_stage, resolving, store, bus):
        make_stage(FixtureYouTubeAdapter()).handle(resolved_message())

        record = store.get(JOB_ID)
        assert record.status is JobStatus.FAILED
        assert record.error == "No videos found for channel"
        assert record.items is None
        assert bus.emitted == [
            (
                Topic.LISTING_ERROR,
                {"jobID": JOB_ID, "email": EMAIL, "error": "No videos found for channel"},
            )
        ]

    def test_adapter_failure(self, make_stage, resolving, store, bus):
        adapter = FixtureYouTubeAdapter(failures=[AdapterTimeoutError("timed out", url="u")])
        make_stage(adapter).handle(resolved_message())

        record = store.get(JOB_ID)
        assert record.status is JobStatus.FAILED
        assert "timed out" in record.error
        message = bus.messages(Topic.LISTING_ERROR)[0]
        assert message["error"].startswith("Failed to fetch videos: ")

    def test_missing_api_key(self, make_stage, resolving, store, bus, acme_adapter):
        make_stage(acme_adapter, api_key="").handle(resolved_message())

        assert store.get(JOB_ID).status is JobStatus.FAILED
        assert bus.messages(Topic.LISTING_ERROR)[0]["error"] == (
            "Failed to fetch videos: YOUTUBE_API_KEY is not configured"
        )
        assert acme_adapter.calls == []

    def test_missing_channel_id_fails_job(self, make_stage, resolving, store, bus, acme_adapter):
        make_stage(acme_adapter).handle({"jobID": JOB_ID, "email": EMAIL})

        assert store.get(JOB_ID).status is JobStatus.FAILED
        assert bus.topics == [Topic.LISTING_ERROR]


class TestListingGuards:
    def test_message_without_email_dropped(self, make_stage, resolving, store, bus, acme_adapter):
        make_stage(acme_adapter).handle({"jobID": JOB_ID, "channelID": "UC123"})

        assert store.get(JOB_ID).status is JobStatus.RESOLVING_CHANNEL
        assert bus.emitted == []

    def test_redelivery_after_completion_ignored(self, make_stage, resolving, store, bus, acme_adapter):
        """Test a second delivery for a finished job changes nothing."""
        stage = make_stage(acme_adapter)
        stage.handle(resolved_message())
        finished = store.get(JOB_ID).to_document()

        stage.handle(resolved_message())

        assert store.get(JOB_ID).to_document() == finished
        assert len(bus.emitted) == 1
        assert len(acme_adapter.calls) == 1

    def test_redelivery_while_fetching_ignored(self, make_stage, resolving, store, bus, acme_adapter):
        """Test a job already claimed by listing is not listed again."""
        claimed = store.get(JOB_ID).advance(JobStatus.FETCHING_ITEMS)
        store.set(JOB_ID, claimed)

        make_stage(acme_adapter).handle(resolved_message())

        assert store.get(JOB_ID).to_document() == claimed.to_document()
        assert bus.emitted == []
        assert acme_adapter.calls == []
