import asyncio
import logging
import time
from typing import Callable, Dict, Tuple

from models.schemas import Song

logger = logging.getLogger(__name__)


def is_fresh(song: Song, now: float, stale_after_seconds: float) -> bool:
    """Whether the stream URL stored on a catalog song can still be served."""
    if not song.stream_url or song.last_fetched_at is None:
        return False
    return now - song.last_fetched_at <= stale_after_seconds


class StreamUrlCache:
    """
    In-memory TTL cache of YouTube video ID -> stream URL.

    Each entry gets its own expiry timer on the running event loop; the
    timer only ever deletes. Lookups also drop entries older than the TTL,
    so the cache stays correct when used outside an event loop.
    Note: Cache is per-process and lost on restart.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # Dict of external_key -> (stream_url, inserted_at)
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def get(self, external_key: str) -> str | None:
        """Get the cached stream URL for a video ID."""
        if external_key not in self._cache:
            return None

        stream_url, inserted_at = self._cache[external_key]

        # Timer may not have fired yet (or never scheduled)
        if self._clock() - inserted_at > self.ttl_seconds:
            self.discard(external_key)
            return None

        return stream_url

    def set(self, external_key: str, stream_url: str) -> None:
        """Cache a stream URL, replacing any older entry and its timer."""
        self._cancel_timer(external_key)
        self._cache[external_key] = (stream_url, self._clock())

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timers[external_key] = loop.call_later(
            self.ttl_seconds, self._expire, external_key
        )

    def discard(self, external_key: str) -> None:
        self._cancel_timer(external_key)
        self._cache.pop(external_key, None)

    def close(self) -> None:
        """Cancel every pending expiry and drop all entries."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._cache.clear()

    def _expire(self, external_key: str) -> None:
        self._timers.pop(external_key, None)
        if self._cache.pop(external_key, None) is not None:
            logger.debug("Stream cache entry expired for %s", external_key)

    def _cancel_timer(self, external_key: str) -> None:
        handle = self._timers.pop(external_key, None)
        if handle is not None:
            handle.cancel()

    def __contains__(self, external_key: str) -> bool:
        return self.get(external_key) is not None

    def __len__(self) -> int:
        return len(self._cache)
