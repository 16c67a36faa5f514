"""End-to-end tests driving jobs through the threaded bus and a file database."""

import json
from unittest.mock import patch

import pytest
import requests

from channel_digest.adapters import AdapterHTTPError, RetryPolicy, YouTubeAdapter
from channel_digest.config.environment import EnvironmentConfig
from channel_digest.config.models import AppConfig
from channel_digest.domain.models import JobStatus
from channel_digest.events import EventBus, Topic
from channel_digest.persistence import SqlJobStore, close_database, init_database
from channel_digest.pipeline import JobPipeline

from tests.helpers import FixtureYouTubeAdapter


@pytest.fixture
def file_store(tmp_path):
    init_database(f"sqlite:///{tmp_path / 'jobs.db'}")
    yield SqlJobStore()
    close_database()


@pytest.fixture
def event_bus():
    bus = EventBus(worker_count=4)
    yield bus
    bus.shutdown(wait=True)


@pytest.fixture
def run_pipeline(file_store, event_bus):
    """Build and register a pipeline; returns (pipeline, outcomes)."""

    def _build(adapter, api_key="KEY"):
        outcomes = []
        pipeline = JobPipeline(
            app_config=AppConfig(),
            env_config=EnvironmentConfig(youtube_api_key=api_key),
            bus=event_bus,
            store=file_store,
            adapter=adapter,
            outcome_handler=outcomes.append,
        )
        pipeline.register()
        return pipeline, outcomes

    return _build


def submit(pipeline, channel="@acme", email="viewer@example.com"):
    response = pipeline.submission.submit({"channel": channel, "email": email})
    assert response.status_code == 201
    return response.job_id


class TestEndToEnd:
    """Jobs run from submission to a terminal status."""

    def test_job_completes_with_items(self, run_pipeline, event_bus, file_store, youtube_fixture_path):
        adapter = FixtureYouTubeAdapter.from_yaml(youtube_fixture_path)
        pipeline, outcomes = run_pipeline(adapter)

        job_id = submit(pipeline)
        assert event_bus.join(timeout=10)

        record = file_store.get(job_id)
        assert record.status is JobStatus.ITEMS_FETCHED
        assert record.channel_id == "UC123"
        assert record.channel_name == "Acme"
        assert [item.item_id for item in record.items] == ["vid2", "vid3", "vid1"]

        (outcome,) = outcomes
        assert outcome["jobID"] == job_id
        assert outcome["channelName"] == "Acme"
        assert len(outcome["items"]) == 3

    def test_unknown_channel_fails(self, run_pipeline, event_bus, file_store, youtube_fixture_path):
        pipeline, outcomes = run_pipeline(FixtureYouTubeAdapter.from_yaml(youtube_fixture_path))

        job_id = submit(pipeline, channel="@unknown")
        assert event_bus.join(timeout=10)

        record = file_store.get(job_id)
        assert record.status is JobStatus.FAILED
        assert record.error == "Channel not found"
        assert outcomes == [{"jobID": job_id, "email": "viewer@example.com"}]

    def test_transient_failure_then_success(self, run_pipeline, event_bus, file_store, youtube_fixture_path):
        """Test a job completes when the adapter recovers within the retry policy."""
        adapter = YouTubeAdapter(retry_policy=RetryPolicy(max_retries=2, initial_delay=0.0))
        fixture = FixtureYouTubeAdapter.from_yaml(youtube_fixture_path)
        calls = []

        def fake_request(method, url, params, timeout):
            calls.append(params["type"])
            if len(calls) == 1:
                raise requests.exceptions.ConnectionError("reset")
            response = requests.Response()
            response.status_code = 200
            if params["type"] == "channel":
                entries = [{"id": {"channelId": "UC123"}, "snippet": {"title": "Acme"}}]
            else:
                entries = [
                    {
                        "id": {"videoId": item.item_id},
                        "snippet": {"title": item.title, "publishedAt": item.published_at.isoformat()},
                    }
                    for item in fixture.items["UC123"]
                ]
            response._content = json.dumps({"items": entries}).encode()
            return response

        pipeline, outcomes = run_pipeline(adapter)
        with patch.object(adapter._session, "request", side_effect=fake_request):
            job_id = submit(pipeline)
            assert event_bus.join(timeout=10)

        assert calls == ["channel", "channel", "video"]
        assert file_store.get(job_id).status is JobStatus.ITEMS_FETCHED

    def test_permanent_failure_reported(self, run_pipeline, event_bus, file_store):
        adapter = FixtureYouTubeAdapter(failures=[AdapterHTTPError("HTTP 403: quota exceeded", 403, "u")])
        pipeline, outcomes = run_pipeline(adapter)

        job_id = submit(pipeline)
        assert event_bus.join(timeout=10)

        record = file_store.get(job_id)
        assert record.status is JobStatus.FAILED
        assert outcomes[0]["error"].startswith("Failed to resolve channel: ")

    def test_missing_api_key_fails_every_job(self, run_pipeline, event_bus, file_store, youtube_fixture_path):
        pipeline, outcomes = run_pipeline(FixtureYouTubeAdapter.from_yaml(youtube_fixture_path), api_key=None)

        job_ids = [submit(pipeline) for _ in range(3)]
        assert event_bus.join(timeout=10)

        assert len(set(job_ids)) == 3
        for job_id in job_ids:
            assert file_store.get(job_id).status is JobStatus.FAILED
        assert len(outcomes) == 3

    def test_concurrent_jobs_are_independent(self, run_pipeline, event_bus, file_store, youtube_fixture_path):
        pipeline, outcomes = run_pipeline(FixtureYouTubeAdapter.from_yaml(youtube_fixture_path))

        good = [submit(pipeline) for _ in range(5)]
        bad = [submit(pipeline, channel="@unknown") for _ in range(5)]
        assert event_bus.join(timeout=20)

        assert {file_store.get(job_id).status for job_id in good} == {JobStatus.ITEMS_FETCHED}
        assert {file_store.get(job_id).status for job_id in bad} == {JobStatus.FAILED}
        assert len(outcomes) == 10

    def test_pipeline_registers_every_topic(self, run_pipeline, event_bus):
        run_pipeline(FixtureYouTubeAdapter())

        assert all(event_bus.has_subscriber(topic) for topic in Topic)
