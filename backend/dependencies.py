import threading
from functools import lru_cache

from config import settings
from services.cache import StreamUrlCache
from services.catalog import SQLiteCatalogStore
from services.resolver import AudioResolver
from services.search import YouTubeSearchService
from services.youtube import StreamExtractor

# Sync dependencies run in the threadpool; lru_cache alone would let two
# first requests each build their own resolver.
_build_lock = threading.Lock()


@lru_cache
def _build_search_service() -> YouTubeSearchService:
    return YouTubeSearchService(settings)


@lru_cache
def _build_resolver() -> AudioResolver:
    return AudioResolver(
        catalog=SQLiteCatalogStore(settings.catalog_path),
        search=_build_search_service(),
        extractor=StreamExtractor(settings),
        stream_cache=StreamUrlCache(settings.stream_cache_ttl_seconds),
        persist=not settings.no_persist,
        stale_after_seconds=settings.stale_threshold_seconds,
        placeholder_cover_art=settings.placeholder_cover_art,
    )


def get_search_service() -> YouTubeSearchService:
    with _build_lock:
        return _build_search_service()


def get_resolver() -> AudioResolver:
    """The process-wide resolver, built on first use."""
    with _build_lock:
        return _build_resolver()


def close_resolver() -> None:
    with _build_lock:
        # Only tear down what was actually built
        if _build_resolver.cache_info().currsize:
            _build_resolver().close()
            _build_resolver.cache_clear()
