from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys for the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Song(BaseModel):
    id: str | None = None  # Assigned by the catalog; None for transient songs
    title: str
    external_key: str | None = None  # YouTube video ID, never changed once set
    thumbnail: str = ""
    cover_art: str = ""
    stream_url: str = ""  # Empty = never resolved or known stale
    last_fetched_at: float | None = None  # Unix timestamp of last extraction
    transient: bool = False  # Never written to the catalog


class SearchMatch(BaseModel):
    """Best YouTube match for a title."""

    external_key: str
    thumbnail: str | None
    title: str


class AudioResponse(CamelModel):
    audio_url: str


class SearchResult(CamelModel):
    title: str
    external_key: str
    thumb: str
    cover_art: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    ytdlp_version: str
    persistence: bool
    cached_streams: int
