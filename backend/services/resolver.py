"""
Audio resolution: song reference -> playable stream URL.

A reference is a catalog id, a YouTube video id or free text (plus an
optional title hint). Resolution walks:

    classify -> catalog lookup -> [backfill video id] -> [create song]
             -> persisted URL fresh? -> in-memory URL? -> yt-dlp

and writes a freshly extracted URL through to the catalog (unless songs are
transient) and then to the in-memory cache.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from models.schemas import SearchMatch, Song
from services.cache import StreamUrlCache, is_fresh
from services.catalog import CatalogStore
from services.errors import ExtractionError, InputError, NotFoundError, PersistenceError
from services.identifiers import Reference, ReferenceKind, classify
from services.inflight import InFlightRegistry
from services.search import YouTubeSearchService
from services.youtube import StreamExtractor

logger = logging.getLogger(__name__)


@dataclass
class PersistOutcome:
    """Result of a best-effort catalog write; callers may ignore it."""

    song: Song
    saved: bool
    error: PersistenceError | None = None


class AudioResolver:
    def __init__(
        self,
        catalog: CatalogStore,
        search: YouTubeSearchService,
        extractor: StreamExtractor,
        stream_cache: StreamUrlCache,
        *,
        persist: bool = True,
        stale_after_seconds: float = 7200,
        placeholder_cover_art: str = "",
        inflight: InFlightRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.catalog = catalog
        self.search = search
        self.extractor = extractor
        self.stream_cache = stream_cache
        self.persist = persist
        self.stale_after_seconds = stale_after_seconds
        self.placeholder_cover_art = placeholder_cover_art
        self.inflight = inflight or InFlightRegistry()
        self._clock = clock

    async def resolve(self, ref_id: str | None = None, title: str | None = None) -> str:
        """
        Return a playable audio URL for a song reference.

        Raises InputError when neither id nor title is given, NotFoundError
        when no YouTube video can be found for the reference and
        ExtractionError when yt-dlp cannot produce a URL.
        """
        ref_id = (ref_id or "").strip() or None
        title = (title or "").strip() or None
        if not ref_id and not title:
            raise InputError()

        reference = classify(ref_id) if ref_id else None
        song = await self._lookup(reference, title)

        if song and not song.external_key:
            song = await self._backfill_external_key(song, title or song.title)

        if song is None:
            song = await self._create_song(title or ref_id)

        if not song.external_key:
            logger.error("No YouTube ID for %r even after search", song.title)
            raise NotFoundError()

        cached = self._cached_stream_url(song)
        if cached:
            return cached

        return await self.inflight.run(
            song.external_key, lambda: self._extract_and_store(song)
        )

    async def _lookup(self, reference: Reference | None, title: str | None) -> Song | None:
        song = None
        if reference is not None:
            if reference.kind is ReferenceKind.CATALOG_ID:
                song = await self._read(self.catalog.get_by_id, reference.value)
            elif reference.kind is ReferenceKind.EXTERNAL_KEY:
                song = await self._read(self.catalog.get_by_external_key, reference.value)
            else:
                song = await self._read(self.catalog.find_by_title, reference.value)

        if song is None and title:
            song = await self._read(self.catalog.find_by_title, title)
        return song

    async def _read(self, lookup, value: str) -> Song | None:
        # A failing catalog read is a miss, resolution falls back to search
        try:
            return await lookup(value)
        except PersistenceError as e:
            logger.warning("Catalog lookup for %r failed: %s", value, e)
            return None

    async def _backfill_external_key(self, song: Song, search_title: str) -> Song:
        match = await self.search.search_by_title(search_title)
        if match is None:
            return song

        song = song.model_copy(
            update={
                "external_key": match.external_key,
                "thumbnail": song.thumbnail or match.thumbnail or "",
                "cover_art": song.cover_art or match.thumbnail or "",
            }
        )
        if self.persist and not song.transient:
            outcome = await self._persist(song)
            song = outcome.song
        logger.info("Fixed missing YouTube ID for %r", song.title)
        return song

    async def _create_song(self, search_title: str) -> Song:
        logger.info("Resolving YouTube ID for %r", search_title)
        match = await self.search.search_by_title(search_title)
        if match is None:
            logger.error("Could not resolve a YouTube ID for %r", search_title)
            raise NotFoundError()

        existing = await self._read(self.catalog.get_by_external_key, match.external_key)
        if existing is not None:
            logger.info("Reusing catalog song %r for %s", existing.title, match.external_key)
            return existing

        song = self._song_from_match(match, search_title)
        if not self.persist:
            logger.info("Transient song created for %r", song.title)
            return song

        try:
            song = await self.catalog.create(song)
        except PersistenceError as e:
            logger.error("Could not store %r, serving it as transient: %s", song.title, e)
            return song
        logger.info("Created new song in catalog: %r", song.title)
        return song

    def _song_from_match(self, match: SearchMatch, search_title: str) -> Song:
        return Song(
            title=match.title or search_title,
            external_key=match.external_key,
            thumbnail=match.thumbnail or "",
            cover_art=match.thumbnail or self.placeholder_cover_art,
            transient=True,
        )

    def _cached_stream_url(self, song: Song) -> str | None:
        if self.persist and not song.transient:
            if is_fresh(song, self._clock(), self.stale_after_seconds):
                logger.info("Using cached audio for %r", song.title)
                return song.stream_url

        stream_url = self.stream_cache.get(song.external_key)
        if stream_url:
            logger.info("Using memory cache for %s", song.external_key)
        return stream_url

    async def _extract_and_store(self, song: Song) -> str:
        logger.info("Fetching fresh audio stream for %s", song.external_key)
        try:
            stream_url = await self.extractor.extract(song.external_key)
        except ExtractionError as e:
            logger.error("No playable audio for %s: %s", song.external_key, e)
            raise

        if self.persist and not song.transient:
            fetched = song.model_copy(
                update={"stream_url": stream_url, "last_fetched_at": self._clock()}
            )
            outcome = await self._persist(fetched)
            if outcome.saved:
                logger.info("Saved audio URL for %r", song.title)

        self.stream_cache.set(song.external_key, stream_url)
        logger.info("Audio ready for %r", song.title)
        return stream_url

    async def _persist(self, song: Song) -> PersistOutcome:
        try:
            stored = await self.catalog.save(song)
        except PersistenceError as e:
            logger.error("Could not save %r to the catalog: %s", song.title, e)
            return PersistOutcome(song=song, saved=False, error=e)
        return PersistOutcome(song=stored, saved=True)

    def close(self) -> None:
        self.stream_cache.close()
        self.catalog.close()
