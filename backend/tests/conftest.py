"""Test configuration and fixtures"""

import asyncio

import pytest

from models.schemas import SearchMatch, SearchResult
from services.cache import StreamUrlCache
from services.catalog import InMemoryCatalogStore
from services.errors import ExtractionError
from services.resolver import AudioResolver


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSearch:
    """Title -> SearchMatch table standing in for the YouTube Data API."""

    def __init__(self, matches: dict[str, SearchMatch] | None = None):
        self.matches = matches or {}
        self.calls: list[str] = []

    async def search_by_title(self, title: str) -> SearchMatch | None:
        self.calls.append(title)
        return self.matches.get(title)

    async def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        self.calls.append(query)
        match = self.matches.get(query)
        if match is None:
            return []
        return [
            SearchResult(
                title=match.title,
                external_key=match.external_key,
                thumb=match.thumbnail or "",
                cover_art="",
            )
        ]


class FakeExtractor:
    """Video ID -> stream URL table standing in for yt-dlp."""

    def __init__(self, urls: dict[str, str] | None = None):
        self.urls = urls or {}
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None

    async def extract(self, external_key: str) -> str:
        self.calls.append(external_key)
        if self.gate is not None:
            await self.gate.wait()
        if external_key not in self.urls:
            raise ExtractionError(f"No audio stream found for {external_key}")
        return self.urls[external_key]


SUNSET = SearchMatch(
    external_key="abc123XYZ_9",
    thumbnail="https://i.ytimg.com/vi/abc123XYZ_9/mqdefault.jpg",
    title="Sunset Vibes (Official Audio)",
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return InMemoryCatalogStore()


@pytest.fixture
def search():
    return FakeSearch({"Sunset Vibes": SUNSET})


@pytest.fixture
def extractor():
    return FakeExtractor({"abc123XYZ_9": "https://cdn.example/stream1"})


@pytest.fixture
def make_resolver(catalog, search, extractor, clock):
    def _make(persist: bool = True, **kwargs) -> AudioResolver:
        return AudioResolver(
            catalog=catalog,
            search=search,
            extractor=extractor,
            stream_cache=StreamUrlCache(1800, clock=clock),
            persist=persist,
            stale_after_seconds=7200,
            placeholder_cover_art="https://via.placeholder.com/300x300?text=WeVibe+Song",
            clock=clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def resolver(make_resolver):
    return make_resolver()
