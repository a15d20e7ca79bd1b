import calendar
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from backend.app.config import INCOME_CACHE_TTL_SECONDS
from backend.app.models import SamplingPeriod, VideoBucket
from backend.app.services.channel_resolver import ChannelResolver
from backend.app.services.earnings import compute_average_views, estimate_earnings
from backend.app.services.errors import (
    IncomeCalculatorError,
    InvalidRequestError,
    ProcessingError,
    QuotaOrAuthError,
)

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "channel:"
RANKING_SORTS = {"earnings", "subscribers", "views"}
RANKING_DEFAULT_LIMIT = 10
RANKING_MAX_LIMIT = 50


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso8601(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def one_month_before(value: datetime) -> datetime:
    year, month = (value.year, value.month - 1) if value.month > 1 else (value.year - 1, 12)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def cache_key_for(channel_url: str) -> str:
    return f"{CACHE_KEY_PREFIX}{channel_url}"


class IncomeCalculator:
    """
    Channel URL -> estimated ad income.

    Results are cached per raw URL for ``ttl_seconds``; a live hit is returned
    as-is without touching the YouTube API.
    """

    def __init__(
        self,
        client,
        cache,
        resolver: ChannelResolver | None = None,
        ttl_seconds: int = INCOME_CACHE_TTL_SECONDS,
        now: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self.cache = cache
        self.resolver = resolver or ChannelResolver(client)
        self.ttl_seconds = ttl_seconds
        self._now = now

    def calculate_channel_income(self, channel_url: str, language: str = "ko") -> dict[str, Any]:
        """``language`` only affects error rendering at the HTTP layer, never the result."""
        cache_key = cache_key_for(channel_url)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Cache hit for %s", cache_key)
            return cached

        channel_id = self.resolver.resolve(channel_url)
        channel = self.client.get_channel_info(channel_id)
        samples, period = self.fetch_recent_videos(channel_id)

        average_views = compute_average_views(samples[VideoBucket.STANDARD], samples[VideoBucket.SHORT])
        earnings = estimate_earnings(average_views)

        result = {
            "channel_id": channel_id,
            "channel_title": channel.title,
            "statistics": {
                "subscribers": channel.subscriber_count,
                "total_views": channel.total_view_count,
                "video_count": channel.video_count,
                "average_views": {
                    "standard": average_views.standard,
                    "short": average_views.short,
                    "total": average_views.total,
                },
            },
            "earnings": earnings.model_dump(),
            "period": period.model_dump(),
        }

        self.cache.set(cache_key, result, self.ttl_seconds)
        logger.info(
            "Estimated income for %s (%s): monthly avg %s USD",
            channel_id,
            channel.title,
            earnings.total.monthly.average,
        )
        return result

    def fetch_recent_videos(self, channel_id: str):
        end = self._now()
        start = one_month_before(end)
        published_after = to_iso8601(start)

        samples = {}
        try:
            id_lists = {
                bucket: self.client.list_recent_video_ids(channel_id, bucket, published_after)
                for bucket in (VideoBucket.STANDARD, VideoBucket.SHORT)
            }
            for bucket, video_ids in id_lists.items():
                samples[bucket] = self.client.get_video_statistics(video_ids) if video_ids else []
        except (QuotaOrAuthError, ProcessingError):
            raise
        except IncomeCalculatorError as exc:
            raise ProcessingError(exc.detail) from exc
        except Exception as exc:
            raise ProcessingError(str(exc)) from exc

        logger.info(
            "Sampled %s standard / %s short videos for %s since %s",
            len(samples[VideoBucket.STANDARD]),
            len(samples[VideoBucket.SHORT]),
            channel_id,
            published_after,
        )
        return samples, SamplingPeriod(start=published_after, end=to_iso8601(end))

    def get_channel_rankings(self, query_params) -> dict[str, Any]:
        params = dict(query_params or {})
        sort_mode = str(params.get("sort") or "earnings").lower()
        if sort_mode not in RANKING_SORTS:
            raise InvalidRequestError("sort must be one of: earnings, subscribers, views")
        raw_limit = params.get("limit")
        if raw_limit is None or raw_limit == "":
            raw_limit = RANKING_DEFAULT_LIMIT
        try:
            limit = int(raw_limit)
        except (TypeError, ValueError) as exc:
            raise InvalidRequestError("limit must be an integer") from exc
        limit = max(1, min(limit, RANKING_MAX_LIMIT))

        channels = {}
        for _key, result in self.cache.live_items(CACHE_KEY_PREFIX):
            channels[result["channel_id"]] = result

        def sort_value(result: dict[str, Any]) -> int:
            if sort_mode == "subscribers":
                return result["statistics"]["subscribers"]
            if sort_mode == "views":
                return result["statistics"]["total_views"]
            return result["earnings"]["total"]["monthly"]["average"]

        ranked = sorted(channels.values(), key=sort_value, reverse=True)[:limit]
        items = [
            {
                "rank": index,
                "channel_id": result["channel_id"],
                "channel_title": result["channel_title"],
                "subscribers": result["statistics"]["subscribers"],
                "total_views": result["statistics"]["total_views"],
                "monthly_earnings": result["earnings"]["total"]["monthly"],
            }
            for index, result in enumerate(ranked, start=1)
        ]
        return {"items": items, "meta": {"sort": sort_mode, "limit": limit, "count": len(items)}}
