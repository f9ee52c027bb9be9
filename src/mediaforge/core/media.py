"""Source image, mask, and video blob helpers.

Source images arrive either as files on disk or as base64 data URLs posted
by the frontend.  Masks are produced by the painting canvas as opaque images
and always reach the backend as PNG.  Finished videos are written to the
media directory and referenced by a local URL.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PNG_MIME = "image/png"


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a base64 data URL into ``(mime_type, data)``.

    A bare base64 string without the ``data:`` header is accepted and
    reported as PNG.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    mime_type = PNG_MIME
    payload = data_url
    if data_url.startswith("data:"):
        header, _, payload = data_url.partition(",")
        mime_type = header[len("data:") :].split(";")[0] or PNG_MIME

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e
    return mime_type, data


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


@dataclass(frozen=True)
class SourceImage:
    """Raw bytes of a user supplied image and its MIME type."""

    data: bytes
    mime_type: str

    @classmethod
    def from_data_url(cls, data_url: str) -> SourceImage:
        mime_type, data = parse_data_url(data_url)
        return cls(data=data, mime_type=mime_type)

    @classmethod
    async def from_path(cls, path: Path) -> SourceImage:
        """Read an image file without blocking the event loop."""
        path = Path(path)
        data = await asyncio.to_thread(path.read_bytes)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(data=data, mime_type=mime_type)


def encode_mask_png(mask: bytes) -> bytes:
    """Return the mask image encoded as PNG.

    PNG input is passed through untouched; anything else Pillow can read is
    re-encoded.

    Raises:
        ValueError: If the bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(mask)) as image:
            if image.format == "PNG":
                return mask
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
    except UnidentifiedImageError as e:
        raise ValueError("Mask is not a readable image") from e

    logger.debug("Re-encoded mask image as PNG")
    return buffer.getvalue()


class BlobStore:
    """Writes downloaded artifacts to disk and hands back a local URL.

    Args:
        media_dir: Directory the files are written to.
        url_prefix: URL path under which ``media_dir`` is served.
    """

    def __init__(self, media_dir: Path, url_prefix: str = "/media") -> None:
        self.media_dir = Path(media_dir)
        self.url_prefix = url_prefix.rstrip("/")

    async def save(self, data: bytes, suffix: str = ".mp4") -> str:
        self.media_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4().hex}{suffix}"
        await asyncio.to_thread((self.media_dir / filename).write_bytes, data)
        logger.info(f"Saved {len(data) // 1024}KB blob as {filename}")
        return f"{self.url_prefix}/{filename}"
