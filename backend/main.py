import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from dependencies import close_resolver
from models.schemas import ErrorResponse
from routers import audio, health, search
from services.errors import ResolutionError

logger = logging.getLogger("wevibe")


def configure_logging(level: str) -> None:
    """Timestamped console logging for every module logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Warm up yt-dlp by importing extractors
    import yt_dlp

    yt_dlp.YoutubeDL()

    if not settings.yt_api_key:
        logger.warning("YT_API_KEY is not set - title search will find nothing")
    if settings.no_persist:
        logger.info("NO_PERSIST enabled - songs are resolved transiently")

    yield

    close_resolver()


app = FastAPI(
    title="WeVibe API",
    version="1.0.0",
    docs_url=None,  # Disable Swagger in production
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(health.router)
app.include_router(search.router)
app.include_router(audio.router)


@app.exception_handler(ResolutionError)
async def resolution_error_handler(request: Request, exc: ResolutionError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=5000)
