"""MediaForge — FastAPI Application.

This module defines the FastAPI application factory, all REST API routes,
and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Session state** lives in a single :class:`~mediaforge.core.studio.Studio`
  stored on ``app.state``.  It owns the credential, the single-flight
  dispatcher, the gallery, and the notification buffer.
- **Generation** is awaited inside the request: image requests return in
  seconds, video requests hold the request open while the job is polled.
  Only one generation runs at a time; a second request gets ``409``.
- **Generated videos** are served from the media directory by FastAPI's
  ``StaticFiles`` at ``/media``.  Images and analysis text travel inline in
  the gallery records.

Endpoints
---------
========  ==========================  ====================================
Method    Path                        Purpose
========  ==========================  ====================================
GET       ``/api/config``             Modes, ratios, sizes, styles
GET       ``/api/credential``         Credential status
POST      ``/api/credential``         Store a pasted API key
DELETE    ``/api/credential``         Disconnect the API key
POST      ``/api/generate``           Run one generation
POST      ``/api/generate/cancel``    Cancel the running generation
GET       ``/api/gallery``            Paginated gallery listing
GET       ``/api/gallery/{id}``       Single gallery record
DELETE    ``/api/gallery``            Clear the gallery (``confirm=true``)
GET       ``/api/notifications``      Drain pending notifications
========  ==========================  ====================================

Usage
-----
CLI (installed entry point)::

    mediaforge

Direct invocation::

    python -m mediaforge.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from mediaforge import __version__
from mediaforge.api.models import CredentialRequest, CredentialStatusResponse, GenerateRequest
from mediaforge.core.config import MediaForgeConfig, config
from mediaforge.core.exceptions import (
    CredentialRequired,
    DispatcherBusy,
    GenerationCancelled,
    GenerationError,
    MissingInput,
    StorageQuotaExceeded,
)
from mediaforge.core.gallery_store import filter_gallery_items, paginate_gallery_items
from mediaforge.core.media import SourceImage, encode_mask_png, parse_data_url
from mediaforge.core.models import (
    ASPECT_RATIOS,
    IMAGE_SIZES,
    STYLES,
    VIDEO_RESOLUTIONS,
    GenerationType,
    MediaItem,
)
from mediaforge.core.notifications import BufferedNotificationSink
from mediaforge.core.studio import Studio

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_studio(request: Request) -> Studio:
    return request.app.state.studio


# ---------------------------------------------------------------------------
# Configuration and credential routes.
# ---------------------------------------------------------------------------


@router.get("/config")
async def get_config() -> dict:
    """Return the option lists the frontend needs to build its forms."""
    return {
        "version": __version__,
        "modes": [mode.value for mode in GenerationType],
        "aspect_ratios": ASPECT_RATIOS,
        "image_sizes": IMAGE_SIZES,
        "video_resolutions": VIDEO_RESOLUTIONS,
        "styles": STYLES,
    }


@router.get("/credential", response_model=CredentialStatusResponse)
async def get_credential(studio: Studio = Depends(get_studio)) -> CredentialStatusResponse:
    status = await studio.credential_status()
    return CredentialStatusResponse(active=status.active, source=status.source)


@router.post("/credential", response_model=CredentialStatusResponse)
async def set_credential(
    req: CredentialRequest, studio: Studio = Depends(get_studio)
) -> CredentialStatusResponse:
    """Store a pasted API key and report the resulting status.

    Raises:
        HTTPException: 400 if the key is blank, 507 if it cannot fit in
            storage even after evicting gallery records.
    """
    try:
        studio.connect(req.api_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except StorageQuotaExceeded as e:
        raise HTTPException(status_code=507, detail=str(e)) from e
    status = await studio.credential_status()
    return CredentialStatusResponse(active=status.active, source=status.source)


@router.delete("/credential", response_model=CredentialStatusResponse)
async def delete_credential(studio: Studio = Depends(get_studio)) -> CredentialStatusResponse:
    studio.disconnect()
    status = await studio.credential_status()
    return CredentialStatusResponse(active=status.active, source=status.source)


# ---------------------------------------------------------------------------
# Generation routes.
# ---------------------------------------------------------------------------


@router.post("/generate", response_model=MediaItem)
async def generate(req: GenerateRequest, studio: Studio = Depends(get_studio)) -> MediaItem:
    """Run one generation and return the new gallery record.

    Raises:
        HTTPException: 400 for a missing or undecodable source image or mask,
            401 when no API key is available, 409 while another generation
            is running or when this one was cancelled, 502 when the backend
            failed.
    """
    try:
        source = SourceImage.from_data_url(req.source_image) if req.source_image else None
        mask = encode_mask_png(parse_data_url(req.mask_image)[1]) if req.mask_image else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        return await studio.generate(
            req.mode,
            req.prompt,
            req.generation_config(),
            source=source,
            mask=mask,
        )
    except CredentialRequired as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    except MissingInput as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except (DispatcherBusy, GenerationCancelled) as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/generate/cancel")
async def cancel_generation(studio: Studio = Depends(get_studio)) -> dict:
    return {"cancelled": studio.cancel()}


# ---------------------------------------------------------------------------
# Gallery routes.
# ---------------------------------------------------------------------------


@router.get("/gallery")
async def get_gallery(
    page: int = 1,
    per_page: int = 20,
    media_type: str | None = None,
    studio: Studio = Depends(get_studio),
) -> dict:
    """Return a paginated, newest-first listing of gallery records.

    Args:
        page: Page number (1-indexed, clamped to the valid range).
        per_page: Number of records per page.
        media_type: Optional ``image``, ``video``, or ``text`` filter.
    """
    if per_page < 1:
        raise HTTPException(status_code=400, detail="per_page must be at least 1")
    items = filter_gallery_items(studio.gallery.snapshot(), media_type=media_type)
    result = paginate_gallery_items(items, page, per_page)
    result["is_generating"] = studio.is_generating
    return result


@router.get("/gallery/{item_id}", response_model=MediaItem)
async def get_gallery_item(item_id: str, studio: Studio = Depends(get_studio)) -> MediaItem:
    item = studio.gallery.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.delete("/gallery")
async def clear_gallery(confirm: bool = False, studio: Studio = Depends(get_studio)) -> dict:
    """Clear every gallery record.

    Raises:
        HTTPException: 400 unless ``confirm=true`` is passed.
    """
    if not studio.clear_gallery(confirmed=confirm):
        raise HTTPException(status_code=400, detail="Clearing the gallery requires confirm=true")
    return {"success": True}


@router.get("/notifications")
async def get_notifications(studio: Studio = Depends(get_studio)) -> dict:
    sink = studio.sink
    if not isinstance(sink, BufferedNotificationSink):
        return {"notifications": []}
    return {
        "notifications": [
            {"message": n.message, "level": n.level, "timestamp": n.timestamp}
            for n in sink.drain()
        ]
    }


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(settings: MediaForgeConfig | None = None, studio: Studio | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration to use (defaults to the global ``config``).
        studio: Pre-built session, mainly for tests.  When omitted, one is
            created on startup.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "studio", None) is None:
            app.state.studio = Studio(settings)
            logger.info("Studio initialised.")
        yield
        if app.state.studio.cancel():
            logger.info("Cancelled running generation on shutdown.")

    app = FastAPI(
        title="MediaForge",
        description="Image, video, edit, and analysis generation on Gemini models.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.studio = studio

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.mount("/media", StaticFiles(directory=str(settings.media_dir)), name="media")
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~mediaforge.core.config.config` (which
    loads from ``MEDIAFORGE_SERVER_HOST`` and ``MEDIAFORGE_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:8080``.

    This function is registered as the ``mediaforge`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "mediaforge.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
