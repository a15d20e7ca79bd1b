import logging
from typing import Any

import requests

from backend.app.config import YOUTUBE_API_BASE_URL
from backend.app.models import (
    BUCKET_DURATION_FILTER,
    ChannelCandidate,
    ChannelInfo,
    VideoBucket,
    VideoSample,
)
from backend.app.services.errors import ChannelNotFoundError, ProviderError, QuotaOrAuthError

logger = logging.getLogger(__name__)

VIDEOS_PER_BATCH = 50
RECENT_VIDEOS_MAX_RESULTS = 50
CHANNEL_SEARCH_MAX_RESULTS = 5


def chunked(lst, n):
    for i in range(0, len(lst), n):
        yield lst[i:i + n]


def parse_count(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _is_quota_or_auth_failure(status_code: int, body: str) -> bool:
    if status_code == 403:
        return True
    lowered = body.lower()
    if status_code == 429 and ("quotaexceeded" in lowered or "quota exceeded" in lowered):
        return True
    return status_code == 400 and ("keyinvalid" in lowered or "api key not valid" in lowered)


class YouTubeClient:
    """Thin wrapper over the YouTube Data API v3. Every call carries the API key."""

    def __init__(self, api_key: str, base_url: str = YOUTUBE_API_BASE_URL, timeout: int = 15):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = requests.get(url, params={**params, "key": self.api_key}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(f"YouTube is temporarily unavailable ({exc.__class__.__name__})") from exc

        if response.status_code == 200:
            try:
                return response.json()
            except ValueError as exc:
                raise ProviderError(f"invalid JSON from /{path.lstrip('/')}") from exc

        logger.warning("YouTube %s returned HTTP %s", path, response.status_code)
        if _is_quota_or_auth_failure(response.status_code, response.text):
            raise QuotaOrAuthError()
        raise ProviderError(f"HTTP {response.status_code} from /{path.lstrip('/')}")

    def get_channel_info(self, channel_id: str) -> ChannelInfo:
        logger.info("Fetching channel info for %s", channel_id)
        payload = self._get("channels", {"part": "snippet,statistics", "id": channel_id})
        items = payload.get("items") or []
        if not items:
            raise ChannelNotFoundError(channel_id)

        item = items[0]
        snippet = item.get("snippet") or {}
        stats = item.get("statistics") or {}
        return ChannelInfo(
            channel_id=item.get("id") or channel_id,
            title=snippet.get("title") or "",
            subscriber_count=parse_count(stats.get("subscriberCount")),
            total_view_count=parse_count(stats.get("viewCount")),
            video_count=parse_count(stats.get("videoCount")),
        )

    def search_channels(self, query: str, max_results: int = CHANNEL_SEARCH_MAX_RESULTS) -> list[ChannelCandidate]:
        payload = self._get(
            "search",
            {
                "part": "snippet",
                "type": "channel",
                "q": query,
                "maxResults": max_results,
            },
        )
        candidates = []
        for item in payload.get("items") or []:
            snippet = item.get("snippet") or {}
            channel_id = (item.get("id") or {}).get("channelId") or snippet.get("channelId")
            if not channel_id:
                continue
            title = snippet.get("channelTitle") or snippet.get("title") or ""
            candidates.append(ChannelCandidate(channel_id=channel_id, title=title))
        return candidates

    def list_recent_video_ids(self, channel_id: str, bucket: VideoBucket, published_after: str) -> list[str]:
        payload = self._get(
            "search",
            {
                "part": "id",
                "channelId": channel_id,
                "order": "date",
                "type": "video",
                "videoDuration": BUCKET_DURATION_FILTER[bucket],
                "publishedAfter": published_after,
                "maxResults": RECENT_VIDEOS_MAX_RESULTS,
            },
        )
        ids = []
        for item in payload.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                ids.append(video_id)
        return ids

    def get_video_statistics(self, video_ids: list[str]) -> list[VideoSample]:
        samples: list[VideoSample] = []
        for batch in chunked(video_ids, VIDEOS_PER_BATCH):
            payload = self._get("videos", {"part": "statistics", "id": ",".join(batch)})
            for item in payload.get("items") or []:
                stats = item.get("statistics") or {}
                samples.append(
                    VideoSample(video_id=item.get("id") or "", view_count=parse_count(stats.get("viewCount")))
                )
        return samples
