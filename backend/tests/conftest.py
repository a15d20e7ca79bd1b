import os

import pytest

os.environ.setdefault("YOUTUBE_API_KEY", "test-api-key")

from backend.app.models import ChannelCandidate, ChannelInfo, VideoBucket, VideoSample  # noqa: E402


class FakeYouTubeClient:
    def __init__(self):
        self.calls = []
        self.candidates: list[ChannelCandidate] = []
        self.channel = ChannelInfo(
            channel_id="UC_TEST",
            title="Test Channel",
            subscriber_count=120000,
            total_view_count=45000000,
            video_count=310,
        )
        self.video_ids = {VideoBucket.STANDARD: [], VideoBucket.SHORT: []}
        self.views: dict[str, int] = {}
        self.errors: dict[str, Exception] = {}

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.errors:
            raise self.errors[name]

    def search_channels(self, query, max_results=5):
        self._record("search_channels", query, max_results)
        return list(self.candidates)

    def get_channel_info(self, channel_id):
        self._record("get_channel_info", channel_id)
        return self.channel.model_copy(update={"channel_id": channel_id})

    def list_recent_video_ids(self, channel_id, bucket, published_after):
        self._record("list_recent_video_ids", channel_id, bucket, published_after)
        return list(self.video_ids[bucket])

    def get_video_statistics(self, video_ids):
        self._record("get_video_statistics", list(video_ids))
        return [VideoSample(video_id=video_id, view_count=self.views.get(video_id, 0)) for video_id in video_ids]


@pytest.fixture
def fake_client():
    return FakeYouTubeClient()


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
