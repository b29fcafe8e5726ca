from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # YouTube Data API (title search)
    yt_api_key: str = ""
    youtube_search_url: str = "https://www.googleapis.com/youtube/v3/search"
    search_timeout_seconds: float = 10.0
    search_results_limit: int = 8

    # yt-dlp (stream extraction)
    youtube_watch_url: str = "https://www.youtube.com/watch?v={}"
    socket_timeout: int = 15
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

    # Catalog
    no_persist: bool = False  # Transient mode: never write songs to the catalog
    catalog_path: str = "catalog.db"
    placeholder_cover_art: str = "https://via.placeholder.com/300x300?text=WeVibe+Song"

    # Cache settings
    stale_threshold_seconds: int = 7200  # 2 hours (persisted stream URL)
    stream_cache_ttl_seconds: int = 1800  # 30 minutes (in-memory stream URL)

    # Server
    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
