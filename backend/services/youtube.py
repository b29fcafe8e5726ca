import asyncio
import logging

import yt_dlp

from config import Settings
from services.errors import ExtractionError

logger = logging.getLogger(__name__)

# Prefer m4a, fall back to any audio, then anything playable
AUDIO_FORMAT = "bestaudio[ext=m4a]/bestaudio/best"


def build_ydl_opts(settings: Settings) -> dict:
    """Reusable yt-dlp options for single-video extraction."""
    return {
        "format": AUDIO_FORMAT,
        "quiet": True,
        "no_warnings": True,
        "extract_flat": False,
        "skip_download": True,
        "noplaylist": True,
        "no_check_certificates": True,
        "socket_timeout": settings.socket_timeout,
        "http_headers": {
            "Referer": "https://www.youtube.com/",
            "User-Agent": settings.user_agent,
        },
    }


def _is_audio_only(fmt: dict) -> bool:
    return fmt.get("acodec") != "none" and fmt.get("vcodec") in (None, "none")


def select_stream_url(info: dict) -> str | None:
    """
    Pick a direct audio URL out of a yt-dlp info dict.

    The entry yt-dlp selected for AUDIO_FORMAT wins if it is audio-only.
    Otherwise take the best audio-only entry of `formats` (yt-dlp sorts them
    worst to best), and as a last resort any entry carrying a URL.
    """
    selected = [info, *(info.get("requested_downloads") or [])]
    formats = [f for f in (info.get("formats") or []) if f]
    candidates = [c for c in selected + formats[::-1] if c.get("url")]

    for candidate in candidates:
        if _is_audio_only(candidate):
            return candidate["url"]

    if candidates:
        return candidates[0]["url"]
    return None


class StreamExtractor:
    def __init__(self, settings: Settings):
        self.watch_url = settings.youtube_watch_url
        self.ydl_opts = build_ydl_opts(settings)

    async def extract(self, external_key: str) -> str:
        """
        Resolve a YouTube video ID to a direct audio stream URL.

        yt-dlp blocks for seconds, so it runs in a worker thread. The URL is
        only valid for a few hours; callers cache it accordingly.
        """
        return await asyncio.to_thread(self._extract_blocking, external_key)

    def _extract_blocking(self, external_key: str) -> str:
        url = self.watch_url.format(external_key)

        with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
            try:
                info = ydl.extract_info(url, download=False)
            except yt_dlp.utils.DownloadError as e:
                raise ExtractionError(f"yt-dlp failed: {e}") from e

        if not info:
            raise ExtractionError(f"yt-dlp returned nothing for {external_key}")

        stream_url = select_stream_url(info)
        if not stream_url:
            raise ExtractionError(f"No audio stream found for {external_key}")
        return stream_url
