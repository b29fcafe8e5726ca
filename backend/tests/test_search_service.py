"""YouTube Data API client tests against httpx.MockTransport."""

import asyncio

import httpx
import pytest

from config import Settings
from services.errors import SearchServiceError
from services.search import YouTubeSearchService

SEARCH_PAYLOAD = {
    "items": [
        {
            "id": {"kind": "youtube#video", "videoId": "abc123XYZ_9"},
            "snippet": {
                "title": "Sunset Vibes (Official Audio)",
                "thumbnails": {
                    "medium": {"url": "https://i.ytimg.com/vi/abc123XYZ_9/mqdefault.jpg"},
                    "high": {"url": "https://i.ytimg.com/vi/abc123XYZ_9/hqdefault.jpg"},
                },
            },
        },
        {
            "id": {"kind": "youtube#video", "videoId": "dQw4w9WgXcQ"},
            "snippet": {"title": "Sunset Vibes (Live)"},
        },
        {
            "id": {"kind": "youtube#channel", "channelId": "UC123"},
            "snippet": {"title": "Sunset Vibes Channel"},
        },
    ]
}


def make_service(handler) -> YouTubeSearchService:
    settings = Settings(yt_api_key="test-key")
    return YouTubeSearchService(settings, transport=httpx.MockTransport(handler))


def test_search_by_title_requests_single_result():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"items": SEARCH_PAYLOAD["items"][:1]})

    match = asyncio.run(make_service(handler).search_by_title("Sunset Vibes"))

    assert match.external_key == "abc123XYZ_9"
    assert match.title == "Sunset Vibes (Official Audio)"
    assert match.thumbnail == "https://i.ytimg.com/vi/abc123XYZ_9/mqdefault.jpg"
    assert seen["maxResults"] == "1"
    assert seen["type"] == "video"
    assert seen["q"] == "Sunset Vibes"
    assert seen["key"] == "test-key"


def test_search_by_title_no_items_is_no_match():
    service = make_service(lambda request: httpx.Response(200, json={"items": []}))
    assert asyncio.run(service.search_by_title("zzqqnonexistent")) is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(403, json={"error": {"message": "quotaExceeded"}}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"kind": "youtube#searchListResponse"}),
        httpx.Response(200, json={"items": [{"id": {"channelId": "UC123"}}]}),
        httpx.Response(200, json={"items": ["abc123XYZ_9"]}),
        httpx.Response(200, json={"items": [{"id": {"videoId": 12345}}]}),
        httpx.Response(200, json={"items": [{"id": {"videoId": "abc123XYZ_9"}, "snippet": "oops"}]}),
        httpx.Response(200, json={"items": [{"id": {"videoId": "abc123XYZ_9"}, "snippet": {"title": ["x"]}}]}),
        httpx.Response(200, json={"items": [{"id": {"videoId": "abc123XYZ_9"}, "snippet": {"thumbnails": []}}]}),
        httpx.Response(
            200, json={"items": [{"id": {"videoId": "abc123XYZ_9"}, "snippet": {"thumbnails": {"medium": "u"}}}]}
        ),
        httpx.Response(
            200,
            json={"items": [{"id": {"videoId": "abc123XYZ_9"}, "snippet": {"thumbnails": {"medium": {"url": 7}}}}]},
        ),
    ],
)
def test_search_by_title_swallows_bad_responses(response):
    service = make_service(lambda request: response)
    assert asyncio.run(service.search_by_title("Sunset Vibes")) is None


def test_search_by_title_swallows_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert asyncio.run(make_service(handler).search_by_title("Sunset Vibes")) is None


def test_search_lists_videos_only():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=SEARCH_PAYLOAD)

    results = asyncio.run(make_service(handler).search("Sunset Vibes"))

    assert seen["maxResults"] == "8"
    assert [r.external_key for r in results] == ["abc123XYZ_9", "dQw4w9WgXcQ"]
    assert results[0].thumb.endswith("mqdefault.jpg")
    assert results[0].cover_art.endswith("hqdefault.jpg")
    assert results[1].thumb == ""
    assert results[1].cover_art == ""


def test_search_raises_on_upstream_failure():
    service = make_service(lambda request: httpx.Response(500))
    with pytest.raises(SearchServiceError):
        asyncio.run(service.search("Sunset Vibes"))


def test_search_skips_malformed_items():
    payload = {
        "items": [
            {"id": {"videoId": "dQw4w9WgXcQ"}, "snippet": "oops"},
            {"id": {"videoId": "kJQP7kiw5Fk"}, "snippet": {"thumbnails": {"high": []}}},
            SEARCH_PAYLOAD["items"][0],
        ]
    }
    service = make_service(lambda request: httpx.Response(200, json=payload))

    results = asyncio.run(service.search("Sunset Vibes"))

    assert [r.external_key for r in results] == ["abc123XYZ_9"]


def test_search_item_without_snippet_has_empty_fields():
    payload = {"items": [{"id": {"videoId": "abc123XYZ_9"}}]}
    service = make_service(lambda request: httpx.Response(200, json=payload))

    results = asyncio.run(service.search("Sunset Vibes"))

    assert [(r.title, r.thumb, r.cover_art) for r in results] == [("", "", "")]
