"""YouTube Data API v3 adapter implementation."""

from typing import Any, Dict, List, Optional

from channel_digest.domain.models import ChannelCandidate, Item
from channel_digest.logging import get_logger
from channel_digest.utils.timestamps import parse_iso_datetime

from .base import BaseAdapter
from .exceptions import AdapterConfigurationError, AdapterResponseError

logger = get_logger(__name__, component="adapter")

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class YouTubeAdapter(BaseAdapter):
    """Adapter for the YouTube Data API v3 ``search`` endpoint.

    Both capabilities use the same endpoint:

    - channel search: ``type=channel&q=<text>``
    - recent videos: ``type=video&channelId=<id>&order=date&maxResults=<n>``

    API Details:
        Endpoint: {api_base_url}/search
        Method: GET
        Authentication: API key in the ``key`` query parameter
        Response: JSON object with an ``items`` array
    """

    ADAPTER_NAME = "youtube"
    DEFAULT_API_BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(self, api_base_url: str = DEFAULT_API_BASE_URL, **kwargs) -> None:
        """Initialize the adapter.

        Args:
            api_base_url: Base URL of the Data API (overridable for tests and proxies)
            **kwargs: Passed to BaseAdapter (timeout, user_agent, retry_policy, session)
        """
        super().__init__(**kwargs)
        self.api_base_url = api_base_url.rstrip("/")

    @property
    def search_url(self) -> str:
        return f"{self.api_base_url}/search"

    def search_channels(self, query: str, api_key: str) -> List[ChannelCandidate]:
        self._require_key(api_key)

        params = {"part": "snippet", "type": "channel", "q": query, "key": api_key}
        logger.info(
            "Searching YouTube channels",
            extra={"adapter": self.ADAPTER_NAME, "query": query},
        )

        data = self._get_json(self.search_url, params, "channel search")
        candidates = []
        for entry in self._items(data):
            candidate = self._transform_channel(entry)
            if candidate is not None:
                candidates.append(candidate)

        logger.info(
            "Channel search finished",
            extra={"adapter": self.ADAPTER_NAME, "query": query, "count": len(candidates)},
        )
        return candidates

    def list_recent_items(self, channel_id: str, api_key: str, limit: int) -> List[Item]:
        self._require_key(api_key)

        params = {
            "part": "snippet",
            "channelId": channel_id,
            "maxResults": str(limit),
            "order": "date",
            "type": "video",
            "key": api_key,
        }
        logger.info(
            "Listing recent YouTube videos",
            extra={"adapter": self.ADAPTER_NAME, "channel_id": channel_id, "limit": limit},
        )

        data = self._get_json(self.search_url, params, "video listing")
        items = []
        for entry in self._items(data):
            item = self._transform_item(entry)
            if item is not None:
                items.append(item)

        logger.info(
            "Video listing finished",
            extra={"adapter": self.ADAPTER_NAME, "channel_id": channel_id, "count": len(items)},
        )
        return items

    @staticmethod
    def _require_key(api_key: str) -> None:
        if not api_key:
            raise AdapterConfigurationError("YouTube API key is required")

    @staticmethod
    def _items(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = data.get("items", [])
        if items is None:
            return []
        if not isinstance(items, list):
            raise AdapterResponseError(
                f"Expected 'items' field to be array, got {type(items).__name__}"
            )
        return [entry for entry in items if isinstance(entry, dict)]

    def _transform_channel(self, entry: Dict[str, Any]) -> Optional[ChannelCandidate]:
        """Map a search result of kind youtube#channel; None if it has no channel id."""
        channel_id = (entry.get("id") or {}).get("channelId")
        if not channel_id:
            logger.warning(
                "Skipping channel search result without channelId",
                extra={"adapter": self.ADAPTER_NAME},
            )
            return None

        snippet = entry.get("snippet") or {}
        return ChannelCandidate(
            channel_id=channel_id,
            channel_name=snippet.get("title") or snippet.get("channelTitle") or "",
        )

    def _transform_item(self, entry: Dict[str, Any]) -> Optional[Item]:
        """Map a search result of kind youtube#video; None if it cannot be used."""
        video_id = (entry.get("id") or {}).get("videoId")
        snippet = entry.get("snippet") or {}
        published_at = parse_iso_datetime(snippet.get("publishedAt"))

        if not video_id or published_at is None:
            logger.warning(
                "Skipping video search result without videoId or publishedAt",
                extra={"adapter": self.ADAPTER_NAME, "video_id": video_id},
            )
            return None

        thumbnail = ((snippet.get("thumbnails") or {}).get("default") or {}).get("url")
        return Item(
            item_id=video_id,
            title=snippet.get("title") or "",
            url=WATCH_URL.format(video_id=video_id),
            published_at=published_at,
            thumbnail_url=thumbnail,
        )
