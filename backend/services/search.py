import logging

import httpx

from config import Settings
from models.schemas import SearchMatch, SearchResult
from services.errors import SearchServiceError

logger = logging.getLogger(__name__)


class YouTubeSearchService:
    """Title search against the YouTube Data API (search.list)."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = settings.yt_api_key
        self.search_url = settings.youtube_search_url
        self.timeout = settings.search_timeout_seconds
        self.results_limit = settings.search_results_limit
        # Tests swap in httpx.MockTransport
        self._transport = transport

    async def _query(self, query: str, max_results: int) -> list[dict]:
        params = {
            "part": "snippet",
            "type": "video",
            "maxResults": max_results,
            "q": query,
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.search_url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise SearchServiceError(f"YouTube search failed: {e}") from e
        except ValueError as e:
            raise SearchServiceError("YouTube search returned invalid JSON") from e

        items = data.get("items") if isinstance(data, dict) else None
        if items is None:
            raise SearchServiceError("YouTube search response has no items")
        if not isinstance(items, list):
            raise SearchServiceError("YouTube search items is not a list")
        return items

    async def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """
        Search YouTube videos for the /search endpoint.

        Raises SearchServiceError when YouTube is unreachable or answers with
        an error; an empty list means YouTube found nothing.
        """
        items = await self._query(query, limit or self.results_limit)

        results = []
        for item in items:
            parsed = _parse_item(item)
            if parsed is None:
                logger.warning("Skipping malformed YouTube search item for %r", query)
                continue
            video_id, snippet = parsed
            results.append(
                SearchResult(
                    title=snippet.get("title", ""),
                    external_key=video_id,
                    thumb=_thumbnail(snippet, "medium") or "",
                    cover_art=_thumbnail(snippet, "high") or "",
                )
            )
        return results

    async def search_by_title(self, title: str) -> SearchMatch | None:
        """Best single match for a title, or None. Never raises."""
        try:
            items = await self._query(title, 1)
        except SearchServiceError as e:
            logger.error("YouTube search failed for %r: %s", title, e)
            return None

        if not items:
            logger.info("No YouTube match for %r", title)
            return None

        parsed = _parse_item(items[0])
        if parsed is None:
            logger.warning("Malformed YouTube search result for %r", title)
            return None

        video_id, snippet = parsed
        return SearchMatch(
            external_key=video_id,
            thumbnail=_thumbnail(snippet, "medium"),
            title=snippet.get("title") or title,
        )


def _parse_item(item) -> tuple[str, dict] | None:
    """
    (video ID, snippet) for a well-formed search.list item, else None.

    Channels and playlists have no videoId. Any field of the wrong type makes
    the whole item unusable.
    """
    if not isinstance(item, dict):
        return None
    ident = item.get("id")
    if not isinstance(ident, dict):
        return None
    video_id = ident.get("videoId")
    if not isinstance(video_id, str) or not video_id:
        return None

    snippet = item.get("snippet", {})
    if not isinstance(snippet, dict):
        return None
    if not isinstance(snippet.get("title", ""), str):
        return None

    thumbnails = snippet.get("thumbnails", {})
    if not isinstance(thumbnails, dict):
        return None
    for thumbnail in thumbnails.values():
        if not isinstance(thumbnail, dict) or not isinstance(thumbnail.get("url", ""), str):
            return None
    return video_id, snippet


def _thumbnail(snippet: dict, size: str) -> str | None:
    return snippet.get("thumbnails", {}).get(size, {}).get("url")
