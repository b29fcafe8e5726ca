"""
Song catalog used by the audio resolver.

The resolver only needs a handful of operations: fetch by catalog id, by
YouTube video id, or by a case-insensitive piece of the title, plus create
and update. Two stores implement them:

    InMemoryCatalogStore:  dict-backed, for tests and local development
    SQLiteCatalogStore:    single-file database, the default deployment

Both keep an existing external_key on update: once a song is linked to a
YouTube video that link is never replaced by a different one.
"""

import asyncio
import logging
import secrets
import sqlite3
import threading
from abc import ABC, abstractmethod

from models.schemas import Song
from services.errors import PersistenceError

logger = logging.getLogger(__name__)


def new_song_id() -> str:
    """24 hex chars, the same shape as the ids the web client already stores."""
    return secrets.token_hex(12)


class CatalogStore(ABC):
    @abstractmethod
    async def get_by_id(self, song_id: str) -> Song | None:
        ...

    @abstractmethod
    async def get_by_external_key(self, external_key: str) -> Song | None:
        ...

    @abstractmethod
    async def find_by_title(self, title: str) -> Song | None:
        """First song whose title contains `title`, ignoring case."""

    @abstractmethod
    async def create(self, song: Song) -> Song:
        """Insert a new song and return it with its catalog id."""

    @abstractmethod
    async def save(self, song: Song) -> Song:
        """Update an existing song in place."""

    def close(self) -> None:
        pass


class InMemoryCatalogStore(CatalogStore):
    def __init__(self):
        # Insertion order doubles as the match order for title lookups
        self._songs: dict[str, Song] = {}

    async def get_by_id(self, song_id: str) -> Song | None:
        song = self._songs.get(song_id)
        return song.model_copy() if song else None

    async def get_by_external_key(self, external_key: str) -> Song | None:
        for song in self._songs.values():
            if song.external_key == external_key:
                return song.model_copy()
        return None

    async def find_by_title(self, title: str) -> Song | None:
        needle = title.lower()
        for song in self._songs.values():
            if needle in song.title.lower():
                return song.model_copy()
        return None

    async def create(self, song: Song) -> Song:
        stored = song.model_copy(update={"id": new_song_id(), "transient": False})
        self._songs[stored.id] = stored
        return stored.model_copy()

    async def save(self, song: Song) -> Song:
        if song.id is None or song.id not in self._songs:
            raise PersistenceError(f"Song {song.id!r} is not in the catalog")

        existing = self._songs[song.id]
        stored = song.model_copy(
            update={"external_key": existing.external_key or song.external_key}
        )
        self._songs[song.id] = stored
        return stored.model_copy()

    def __len__(self) -> int:
        return len(self._songs)


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS songs (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL,
    external_key TEXT,
    thumbnail TEXT NOT NULL DEFAULT '',
    cover_art TEXT NOT NULL DEFAULT '',
    stream_url TEXT NOT NULL DEFAULT '',
    last_fetched_at REAL
);

CREATE INDEX IF NOT EXISTS idx_songs_external_key ON songs(external_key);
"""

_COLUMNS = "id, title, external_key, thumbnail, cover_art, stream_url, last_fetched_at"


class SQLiteCatalogStore(CatalogStore):
    """
    Thread-safe SQLite catalog.

    One connection shared behind a lock; every public call runs in a worker
    thread so the event loop never waits on disk I/O.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.executescript(_SCHEMA_SQL)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not open catalog at {path}: {e}") from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _fetch_one(self, sql: str, params: tuple) -> Song | None:
        with self._lock:
            try:
                row = self._conn.execute(sql, params).fetchone()
            except sqlite3.Error as e:
                raise PersistenceError(str(e)) from e
        return self._row_to_song(row) if row else None

    def _execute(self, sql: str, params: tuple) -> int:
        with self._lock:
            try:
                with self._conn:
                    return self._conn.execute(sql, params).rowcount
            except sqlite3.Error as e:
                raise PersistenceError(str(e)) from e

    @staticmethod
    def _row_to_song(row: sqlite3.Row) -> Song:
        return Song(
            id=row["id"],
            title=row["title"],
            external_key=row["external_key"],
            thumbnail=row["thumbnail"],
            cover_art=row["cover_art"],
            stream_url=row["stream_url"],
            last_fetched_at=row["last_fetched_at"],
        )

    async def get_by_id(self, song_id: str) -> Song | None:
        return await asyncio.to_thread(
            self._fetch_one, f"SELECT {_COLUMNS} FROM songs WHERE id = ?", (song_id,)
        )

    async def get_by_external_key(self, external_key: str) -> Song | None:
        return await asyncio.to_thread(
            self._fetch_one,
            f"SELECT {_COLUMNS} FROM songs WHERE external_key = ? ORDER BY seq LIMIT 1",
            (external_key,),
        )

    async def find_by_title(self, title: str) -> Song | None:
        # instr() avoids LIKE's wildcard characters in user input
        return await asyncio.to_thread(
            self._fetch_one,
            f"SELECT {_COLUMNS} FROM songs WHERE instr(lower(title), ?) > 0 ORDER BY seq LIMIT 1",
            (title.lower(),),
        )

    async def create(self, song: Song) -> Song:
        stored = song.model_copy(update={"id": new_song_id(), "transient": False})
        await asyncio.to_thread(
            self._execute,
            f"INSERT INTO songs ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                stored.id,
                stored.title,
                stored.external_key,
                stored.thumbnail,
                stored.cover_art,
                stored.stream_url,
                stored.last_fetched_at,
            ),
        )
        return stored

    async def save(self, song: Song) -> Song:
        if song.id is None:
            raise PersistenceError("Cannot save a song without a catalog id")

        updated = await asyncio.to_thread(
            self._execute,
            """
            UPDATE songs SET
                title = ?,
                external_key = COALESCE(external_key, ?),
                thumbnail = ?,
                cover_art = ?,
                stream_url = ?,
                last_fetched_at = ?
            WHERE id = ?
            """,
            (
                song.title,
                song.external_key,
                song.thumbnail,
                song.cover_art,
                song.stream_url,
                song.last_fetched_at,
                song.id,
            ),
        )
        if not updated:
            raise PersistenceError(f"Song {song.id!r} is not in the catalog")
        return await self.get_by_id(song.id)
