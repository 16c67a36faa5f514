"""Test doubles shared across the test suite."""

from .fixture_adapter import FixtureYouTubeAdapter, load_fixture_data
from .recording_bus import RecordingBus

__all__ = ["FixtureYouTubeAdapter", "RecordingBus", "load_fixture_data"]
