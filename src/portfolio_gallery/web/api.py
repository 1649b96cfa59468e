"""FastAPI web interface for portfolio-gallery."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_gallery import __version__
from portfolio_gallery.albums.cache import AlbumCache
from portfolio_gallery.albums.errors import GalleryError
from portfolio_gallery.albums.service import AlbumService
from portfolio_gallery.albums.storage import create_object_store

from .config import WebConfig, get_default_config

logger = logging.getLogger(__name__)

# Album listings change rarely; let the CDN keep them for a month
CACHE_CONTROL = "s-maxage=2592000, stale-while-revalidate=2592000"


# Pydantic models for responses


class MediaItemResponse(BaseModel):
    name: str
    path: str
    url: str = Field(..., description="Site-relative URL to render, the thumbnail when available")
    originalUrl: str = Field(..., description="Absolute URL of the full-size asset")
    updated: Optional[str] = None
    size: Optional[int] = None
    contentType: Optional[str] = None
    mediaType: str


class AlbumResponse(BaseModel):
    name: str
    photoCount: int
    videoCount: int
    itemCount: int
    updatedAt: Optional[str] = None
    averageUpdatedAt: Optional[str] = None
    coverPhoto: Optional[MediaItemResponse] = None
    photos: Optional[List[MediaItemResponse]] = Field(None, description="Only present on album detail responses")
    isHydrated: bool


class SummaryResponse(BaseModel):
    albumCount: int
    photoCount: int
    videoCount: int
    itemCount: int


class PaginationResponse(BaseModel):
    page: int
    pageSize: int
    totalAlbums: int
    totalPages: int
    hasMore: bool
    nextPage: Optional[int] = None
    prevPage: Optional[int] = None


class AlbumPageResponse(BaseModel):
    albums: List[AlbumResponse]
    summary: SummaryResponse
    pagination: PaginationResponse


class AlbumDetailResponse(BaseModel):
    album: AlbumResponse


class ErrorResponse(BaseModel):
    error: str


def build_album_service(config: WebConfig) -> AlbumService:
    """Create the process-wide album service from configuration."""
    return AlbumService(
        store=create_object_store(config),
        cache=AlbumCache(ttl=config.cache_ttl),
        default_bucket=config.bucket,
        public_base_url=config.public_base_url,
    )


def get_album_service(request: Request) -> AlbumService:
    return request.app.state.album_service


def get_config(request: Request) -> WebConfig:
    return request.app.state.config


# API endpoints

router = APIRouter(prefix="/api")


@router.get(
    "/photo-albums",
    response_model=AlbumPageResponse,
    response_model_exclude_unset=True,
    responses={500: {"model": ErrorResponse}},
)
async def list_photo_albums(
    response: Response,
    page: Optional[str] = Query(None, description="1-based page number"),
    page_size: Optional[str] = Query(None, alias="pageSize", description="Albums per page (max 50)"),
    service: AlbumService = Depends(get_album_service),
    config: WebConfig = Depends(get_config),
):
    """List albums one page at a time, without their photo lists."""
    response.headers["Cache-Control"] = CACHE_CONTROL
    return await service.get_paginated_albums(
        page=page,
        page_size=page_size if page_size is not None else config.page_size,
    )


@router.get(
    "/photo-albums/{album_name}",
    response_model=AlbumDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_photo_album(
    album_name: str,
    response: Response,
    service: AlbumService = Depends(get_album_service),
):
    """Get one album with its full photo list."""
    response.headers["Cache-Control"] = CACHE_CONTROL
    if not album_name or not album_name.strip():
        raise HTTPException(status_code=400, detail="An album name must be provided.")

    album = await service.get_album_details(album_name)
    if album is None:
        raise HTTPException(status_code=404, detail="Album not found.")
    return {"album": album.to_dict(include_items=True)}


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now()}


# Error handlers: every error body is {"error": message}


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request parameters."})


async def gallery_error_handler(request: Request, exc: GalleryError) -> JSONResponse:
    logger.error(f"Failed to load photo albums: {exc}", exc_info=True)
    message = str(exc) or "Unable to load photo albums. Please try again."
    return JSONResponse(status_code=500, content={"error": message})


def create_app(config: Optional[WebConfig] = None, service: Optional[AlbumService] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings; loaded from the config file and environment when
            omitted.
        service: Album service to serve from; built from config at startup
            when omitted.
    """
    config = config or get_default_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Service is built at startup unless one was injected
        if app.state.album_service is None:
            app.state.album_service = build_album_service(config)
        yield
        await app.state.album_service.close()

    app = FastAPI(
        title="portfolio-gallery API",
        description="Photo albums for the portfolio site",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.album_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(GalleryError, gallery_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
