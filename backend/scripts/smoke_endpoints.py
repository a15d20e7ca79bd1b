from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import patch

from starlette.requests import Request

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("YOUTUBE_API_KEY", "smoke-key")

import backend.main as main_module
from backend.app.models import CalculateRequest
from backend.app.services.errors import ChannelLookupError, QuotaOrAuthError


def make_request(ip: str = "127.0.0.1") -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/",
            "headers": [],
            "client": (ip, 8000),
            "query_string": b"",
            "server": ("test", 80),
            "scheme": "http",
            "http_version": "1.1",
        }
    )


def fake_api(views_by_id: dict[str, int], search_items: list[dict] | None = None):
    calls = {"count": 0}

    def fake_get(path: str, params: dict) -> dict:
        calls["count"] += 1
        if path == "channels":
            return {
                "items": [
                    {
                        "id": params["id"],
                        "snippet": {"title": "Smoke Channel"},
                        "statistics": {"subscriberCount": "1000", "viewCount": "250000", "videoCount": "40"},
                    }
                ]
            }
        if path == "search" and params.get("type") == "channel":
            return {"items": search_items or []}
        if path == "search":
            prefix = "s" if params["videoDuration"] == "short" else "m"
            return {"items": [{"id": {"videoId": v}} for v in views_by_id if v.startswith(prefix)]}
        if path == "videos":
            ids = params["id"].split(",")
            return {"items": [{"id": v, "statistics": {"viewCount": str(views_by_id[v])}} for v in ids]}
        raise AssertionError(f"unexpected path {path}")

    return fake_get, calls


def assert_true(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def reset_state() -> None:
    main_module.income_cache.clear()


def test_health() -> None:
    payload = main_module.health()
    assert_true(payload.get("ok") is True, "/health should return ok=true")


def test_calculate_cache() -> None:
    reset_state()
    fake_get, calls = fake_api({"m1": 100000, "s1": 50000})
    body = CalculateRequest(channelUrl="https://www.youtube.com/channel/UC_SMOKE")

    with patch.object(main_module.youtube_client, "_get", side_effect=fake_get):
        payload_1 = main_module.calculate_income(body, make_request())
        payload_2 = main_module.calculate_income(body, make_request())

    monthly = payload_1["data"]["earnings"]["total"]["monthly"]
    assert_true(monthly == {"min": 210, "max": 750, "average": 480}, f"unexpected monthly earnings {monthly}")
    assert_true(payload_1 == payload_2, "/calculate cached response should be identical")
    assert_true(calls["count"] == 5, "/calculate should hit source once then cache")


def test_calculate_handle_lookup() -> None:
    reset_state()
    search_items = [
        {"id": {"channelId": "UC_OTHER"}, "snippet": {"channelTitle": "smoke fan"}},
        {"id": {"channelId": "UC_SMOKE"}, "snippet": {"channelTitle": "smoke"}},
    ]
    fake_get, _calls = fake_api({"m1": 2000}, search_items)

    with patch.object(main_module.youtube_client, "_get", side_effect=fake_get):
        payload = main_module.calculate_income(
            CalculateRequest(channelUrl="https://www.youtube.com/@smoke"), make_request()
        )

    assert_true(payload["data"]["channel_id"] == "UC_SMOKE", "exact title match should win")


def test_calculate_lookup_failure() -> None:
    reset_state()
    with patch.object(main_module.youtube_client, "_get", side_effect=QuotaOrAuthError()):
        try:
            main_module.calculate_income(CalculateRequest(channelUrl="https://www.youtube.com/@smoke"), make_request())
        except ChannelLookupError:
            return
    raise AssertionError("failed search should surface as ChannelLookupError")


def test_rankings() -> None:
    reset_state()
    fake_get, _calls = fake_api({"m1": 100000})
    with patch.object(main_module.youtube_client, "_get", side_effect=fake_get):
        main_module.calculate_income(
            CalculateRequest(channelUrl="https://www.youtube.com/channel/UC_RANKED"), make_request()
        )
    payload = main_module.channel_rankings(make_request())
    items = payload["data"]["items"]
    assert_true(len(items) == 1 and items[0]["channel_id"] == "UC_RANKED", "rankings should list cached channels")


def run() -> int:
    checks = [
        ("health", test_health),
        ("calculate cache", test_calculate_cache),
        ("calculate handle lookup", test_calculate_handle_lookup),
        ("calculate lookup failure", test_calculate_lookup_failure),
        ("rankings", test_rankings),
    ]
    failures = []

    for check_name, check_fn in checks:
        try:
            check_fn()
            print(f"[PASS] {check_name}")
        except Exception as exc:  # pragma: no cover - smoke script output path
            failures.append((check_name, str(exc)))
            print(f"[FAIL] {check_name}: {exc}")

    if failures:
        print(f"\nSmoke checks failed: {len(failures)}")
        for check_name, message in failures:
            print(f"- {check_name}: {message}")
        return 1

    print("\nAll smoke checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
