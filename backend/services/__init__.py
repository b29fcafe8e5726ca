from .errors import ExtractionError, InputError, NotFoundError, PersistenceError, ResolutionError, SearchServiceError
from .cache import StreamUrlCache
from .catalog import CatalogStore, InMemoryCatalogStore, SQLiteCatalogStore
from .search import YouTubeSearchService
from .youtube import StreamExtractor
from .resolver import AudioResolver

__all__ = [
    "AudioResolver",
    "CatalogStore",
    "ExtractionError",
    "InMemoryCatalogStore",
    "InputError",
    "NotFoundError",
    "PersistenceError",
    "ResolutionError",
    "SQLiteCatalogStore",
    "SearchServiceError",
    "StreamExtractor",
    "StreamUrlCache",
    "YouTubeSearchService",
]
