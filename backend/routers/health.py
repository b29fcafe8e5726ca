from fastapi import APIRouter, Depends
from yt_dlp.version import __version__ as ytdlp_version

from dependencies import get_resolver
from models.schemas import HealthResponse
from services.resolver import AudioResolver

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(resolver: AudioResolver = Depends(get_resolver)):
    """Health check endpoint for the deployment probe."""
    return HealthResponse(
        status="healthy",
        ytdlp_version=ytdlp_version,
        persistence=resolver.persist,
        cached_streams=len(resolver.stream_cache),
    )
