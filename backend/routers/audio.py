import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_resolver
from models.schemas import AudioResponse, ErrorResponse
from services.errors import ResolutionError
from services.resolver import AudioResolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["audio"])


@router.get(
    "/audio",
    response_model=AudioResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_audio(
    id: str | None = Query(None, max_length=300, description="Catalog ID, YouTube video ID or title"),
    title: str | None = Query(None, max_length=300, description="Song title"),
    resolver: AudioResolver = Depends(get_resolver),
):
    """
    Universal resolver - returns a playable audio URL for a song.

    `id` may be a catalog ID, a YouTube video ID or free text; `title` is
    used when `id` finds nothing. At least one of them is required.
    """
    try:
        audio_url = await resolver.resolve(id, title)
    except ResolutionError:
        raise
    except Exception:
        logger.exception("/audio failed for id=%r title=%r", id, title)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Failed to fetch audio").model_dump(),
        )

    return AudioResponse(audio_url=audio_url)
