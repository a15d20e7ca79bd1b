from datetime import datetime, timezone

import pytest

from backend.app.models import VideoBucket
from backend.app.services.cache import TTLCache
from backend.app.services.errors import (
    ChannelNotFoundError,
    InvalidRequestError,
    ProcessingError,
    ProviderError,
    QuotaOrAuthError,
)
from backend.app.services.income import IncomeCalculator, one_month_before, to_iso8601

FIXED_NOW = datetime(2025, 3, 31, 12, 30, 0, tzinfo=timezone.utc)
CHANNEL_URL = "https://www.youtube.com/channel/UC_TEST"


def make_calculator(client, clock):
    cache = TTLCache(default_ttl=3600, clock=clock)
    return IncomeCalculator(client, cache, ttl_seconds=21600, now=lambda: FIXED_NOW), cache


def seed_videos(client):
    client.video_ids[VideoBucket.STANDARD] = ["m1", "m2"]
    client.video_ids[VideoBucket.SHORT] = ["s1"]
    client.views.update({"m1": 90000, "m2": 110001, "s1": 50000})


def test_one_month_before_clamps_day():
    assert one_month_before(FIXED_NOW) == datetime(2025, 2, 28, 12, 30, 0, tzinfo=timezone.utc)
    assert one_month_before(datetime(2025, 1, 15, tzinfo=timezone.utc)) == datetime(2024, 12, 15, tzinfo=timezone.utc)


def test_to_iso8601_uses_z_suffix():
    assert to_iso8601(FIXED_NOW) == "2025-03-31T12:30:00.000Z"


def test_calculate_channel_income_result_shape(fake_client, clock):
    seed_videos(fake_client)
    calculator, _cache = make_calculator(fake_client, clock)

    result = calculator.calculate_channel_income(CHANNEL_URL)

    assert result["channel_id"] == "UC_TEST"
    assert result["channel_title"] == "Test Channel"
    assert result["statistics"] == {
        "subscribers": 120000,
        "total_views": 45000000,
        "video_count": 310,
        "average_views": {"standard": 100000, "short": 50000, "total": 150000},
    }
    assert result["earnings"]["total"]["monthly"] == {"min": 210, "max": 750, "average": 480}
    assert result["earnings"]["currency"] == "USD"
    assert result["period"] == {"start": "2025-02-28T12:30:00.000Z", "end": "2025-03-31T12:30:00.000Z"}

    list_calls = [call for call in fake_client.calls if call[0] == "list_recent_video_ids"]
    assert [call[2] for call in list_calls] == [VideoBucket.STANDARD, VideoBucket.SHORT]
    assert all(call[3] == "2025-02-28T12:30:00.000Z" for call in list_calls)


def test_empty_bucket_skips_statistics_call(fake_client, clock):
    fake_client.video_ids[VideoBucket.STANDARD] = ["m1"]
    fake_client.views["m1"] = 3000
    calculator, _cache = make_calculator(fake_client, clock)

    result = calculator.calculate_channel_income(CHANNEL_URL)

    stats_calls = [call for call in fake_client.calls if call[0] == "get_video_statistics"]
    assert stats_calls == [("get_video_statistics", ["m1"])]
    assert result["statistics"]["average_views"] == {"standard": 3000, "short": 0, "total": 3000}


def test_cache_hit_within_ttl_makes_no_calls(fake_client, clock):
    seed_videos(fake_client)
    calculator, _cache = make_calculator(fake_client, clock)

    first = calculator.calculate_channel_income(CHANNEL_URL)
    call_count = len(fake_client.calls)
    clock.advance(21600 - 1)
    second = calculator.calculate_channel_income(CHANNEL_URL, language="en")

    assert second == first
    assert len(fake_client.calls) == call_count


def test_expired_entry_triggers_full_refetch(fake_client, clock):
    seed_videos(fake_client)
    calculator, cache = make_calculator(fake_client, clock)

    calculator.calculate_channel_income(CHANNEL_URL)
    call_count = len(fake_client.calls)
    clock.advance(21600 + 1)
    calculator.calculate_channel_income(CHANNEL_URL)

    assert len(fake_client.calls) == call_count * 2

    cache.expire(f"channel:{CHANNEL_URL}")
    calculator.calculate_channel_income(CHANNEL_URL)
    assert len(fake_client.calls) == call_count * 3


def test_channel_errors_propagate_unchanged(fake_client, clock):
    calculator, cache = make_calculator(fake_client, clock)

    fake_client.errors["get_channel_info"] = QuotaOrAuthError()
    with pytest.raises(QuotaOrAuthError):
        calculator.calculate_channel_income(CHANNEL_URL)

    fake_client.errors["get_channel_info"] = ChannelNotFoundError("UC_TEST")
    with pytest.raises(ChannelNotFoundError):
        calculator.calculate_channel_income(CHANNEL_URL)
    assert len(cache) == 0


def test_video_fetch_failures_become_processing_errors(fake_client, clock):
    calculator, _cache = make_calculator(fake_client, clock)
    fake_client.errors["list_recent_video_ids"] = ProviderError("HTTP 500 from /search")

    with pytest.raises(ProcessingError) as excinfo:
        calculator.calculate_channel_income(CHANNEL_URL)
    assert "HTTP 500" in str(excinfo.value)

    fake_client.errors["list_recent_video_ids"] = QuotaOrAuthError()
    with pytest.raises(QuotaOrAuthError):
        calculator.calculate_channel_income(CHANNEL_URL)


def test_rankings_from_cached_results(fake_client, clock):
    calculator, _cache = make_calculator(fake_client, clock)
    fake_client.video_ids[VideoBucket.STANDARD] = ["m1"]
    fake_client.views["m1"] = 10000
    calculator.calculate_channel_income("https://www.youtube.com/channel/UC_SMALL")
    fake_client.views["m1"] = 500000
    calculator.calculate_channel_income("https://www.youtube.com/channel/UC_BIG")

    rankings = calculator.get_channel_rankings({"sort": "earnings", "limit": "5"})

    assert [item["channel_id"] for item in rankings["items"]] == ["UC_BIG", "UC_SMALL"]
    assert rankings["items"][0]["rank"] == 1
    assert rankings["items"][0]["monthly_earnings"] == {"min": 1000, "max": 3500, "average": 2250}
    assert rankings["meta"] == {"sort": "earnings", "limit": 5, "count": 2}

    clock.advance(21600 + 1)
    assert calculator.get_channel_rankings({})["items"] == []


def test_rankings_reject_unknown_sort(fake_client, clock):
    calculator, _cache = make_calculator(fake_client, clock)
    with pytest.raises(InvalidRequestError):
        calculator.get_channel_rankings({"sort": "vibes"})
    assert calculator.get_channel_rankings({"limit": 999})["meta"]["limit"] == 50


def test_rankings_limit_is_clamped_not_defaulted(fake_client, clock):
    calculator, _cache = make_calculator(fake_client, clock)

    assert calculator.get_channel_rankings({"limit": 0})["meta"]["limit"] == 1
    assert calculator.get_channel_rankings({"limit": "-3"})["meta"]["limit"] == 1
    assert calculator.get_channel_rankings({"limit": None})["meta"]["limit"] == 10
    with pytest.raises(InvalidRequestError):
        calculator.get_channel_rankings({"limit": "abc"})
