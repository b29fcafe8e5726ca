import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_search_service
from models.schemas import ErrorResponse, SearchResult
from services.errors import SearchServiceError
from services.search import YouTubeSearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error).model_dump())


@router.get(
    "/search",
    response_model=list[SearchResult],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search_youtube(
    q: str | None = Query(None, max_length=200, description="Search query"),
    youtube: YouTubeSearchService = Depends(get_search_service),
):
    """
    YouTube direct search - up to 8 videos with thumbnails.

    Results carry the YouTube video ID as `externalKey`; pass it to /audio
    as `id` to play one.
    """
    query = (q or "").strip()
    if not query:
        return error_response(400, "Missing search query")

    logger.info("Searching YouTube for: %r", query)
    try:
        results = await youtube.search(query)
    except SearchServiceError as e:
        logger.error("/search failed for %r: %s", query, e)
        return error_response(500, "Failed to search YouTube")

    if not results:
        return error_response(404, "No results found")

    return results
