"""Gemini backend client scoped to a single dispatch.

:class:`GenAIBackend` wraps the async surface of the ``google-genai`` SDK
(``client.aio``) plus an ``httpx`` client for downloading finished videos.
One backend is built per dispatch, bound to the credential resolved for that
dispatch; an empty key means the SDK picks up its own environment
credential.

Response helpers
----------------
:func:`first_inline_image` and :func:`first_text` walk the parts of the
first candidate the same way for every mode, so pipelines only decide what
to do with an image or text payload, never how to find it.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from google import genai
from google.genai import types

from .config import MediaForgeConfig
from .media import PNG_MIME, SourceImage, to_data_url
from .models import VideoOperation

logger = logging.getLogger(__name__)


def _response_parts(response: types.GenerateContentResponse) -> list[types.Part]:
    candidates = response.candidates or []
    if not candidates or candidates[0].content is None:
        return []
    return candidates[0].content.parts or []


def first_inline_image(response: types.GenerateContentResponse) -> str | None:
    """Return the first inline image of ``response`` as a data URI."""
    for part in _response_parts(response):
        inline = part.inline_data
        if inline is not None and inline.data:
            logger.info(f"Image received: {len(inline.data) // 1024}KB")
            return to_data_url(inline.data, inline.mime_type or PNG_MIME)
    return None


def first_text(response: types.GenerateContentResponse) -> str | None:
    for part in _response_parts(response):
        if part.text:
            return part.text
    return None


def describe_error(exc: BaseException) -> str:
    """Return the most specific human-readable message of ``exc``.

    SDK errors carry the backend's explanation in ``message``.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


def _operation_error(error: Any) -> str | None:
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(getattr(error, "message", None) or error)


def _operation_locator(operation: Any) -> str | None:
    response = getattr(operation, "response", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos or videos[0].video is None:
        return None
    return videos[0].video.uri


def to_video_operation(operation: Any) -> VideoOperation:
    """Normalize an SDK video operation into a :class:`VideoOperation`."""
    return VideoOperation(
        done=bool(operation.done),
        error=_operation_error(getattr(operation, "error", None)),
        locator=_operation_locator(operation),
        handle=operation,
    )


class GenAIBackend:
    """Async Gemini client bound to one API key.

    Args:
        api_key: Secret to authenticate with.  Empty means the SDK resolves
            its own credential from the environment.
        config: Application configuration (timeouts).
        http_client: Optional ``httpx.AsyncClient`` used for downloads.
    """

    def __init__(
        self,
        api_key: str,
        config: MediaForgeConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self._config = config
        self._http_client = http_client
        self._client: genai.Client | None = None

    def _genai(self) -> genai.Client:
        # Built lazily so a missing environment credential surfaces as a
        # generation failure rather than at construction time.
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key or None)
        return self._client

    async def generate_content(
        self,
        model: str,
        parts: list[types.Part],
        image_config: types.ImageConfig | None = None,
    ) -> types.GenerateContentResponse:
        config = None
        if image_config is not None:
            config = types.GenerateContentConfig(image_config=image_config)

        logger.debug(f"generate_content model={model} parts={len(parts)}")
        return await self._genai().aio.models.generate_content(
            model=model,
            contents=[types.Content(role="user", parts=parts)],
            config=config,
        )

    async def submit_video(
        self,
        model: str,
        prompt: str,
        video_config: types.GenerateVideosConfig,
        source: SourceImage | None = None,
    ) -> VideoOperation:
        image = None
        if source is not None:
            image = types.Image(image_bytes=source.data, mime_type=source.mime_type)

        operation = await self._genai().aio.models.generate_videos(
            model=model,
            prompt=prompt,
            image=image,
            config=video_config,
        )
        return to_video_operation(operation)

    async def poll_video(self, operation: VideoOperation) -> VideoOperation:
        refreshed = await self._genai().aio.operations.get(operation.handle)
        return to_video_operation(refreshed)

    async def fetch(self, url: str) -> httpx.Response:
        """GET ``url`` and return the response without raising on status."""
        if self._http_client is not None:
            return await self._http_client.get(url)

        async with httpx.AsyncClient(
            timeout=self._config.download_timeout_seconds,
            follow_redirects=True,
        ) as client:
            return await client.get(url)
