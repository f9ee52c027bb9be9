"""Data models for generation requests and gallery records.

Models
------
GenerationType
    The four generation modes a request can be dispatched under.
GenerationConfig
    Immutable per-request options (aspect ratio, size, resolution, style).
MediaItem
    The persisted gallery record produced by a successful dispatch.
VideoOperation
    Normalized view of an in-flight video synthesis job.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AspectRatio = Literal["1:1", "2:3", "3:2", "3:4", "4:3", "9:16", "16:9", "21:9"]
ImageSize = Literal["1K", "2K", "4K"]
VideoResolution = Literal["720p", "1080p"]
MediaType = Literal["image", "video", "text"]

ASPECT_RATIOS: list[str] = ["1:1", "2:3", "3:2", "3:4", "4:3", "9:16", "16:9", "21:9"]
IMAGE_SIZES: list[str] = ["1K", "2K", "4K"]
VIDEO_RESOLUTIONS: list[str] = ["720p", "1080p"]

# Style labels offered to the user. "None" disables the style suffix.
NO_STYLE = "None"
STYLES: list[str] = [
    NO_STYLE,
    "Photorealistic",
    "Cinematic",
    "Anime",
    "Digital Art",
    "Oil Painting",
    "Watercolor",
    "3D Render",
    "Pixel Art",
    "Sketch",
]


class GenerationType(str, Enum):
    """Generation mode selected by the caller."""

    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    EDIT = "EDIT"
    ANALYZE = "ANALYZE"


class GenerationConfig(BaseModel):
    """Per-request generation options.

    Attributes:
        aspect_ratio: One of the eight supported ratios.
        image_size: Requested output size for the primary image tier.
        video_resolution: Requested video resolution (recorded in metadata).
        style: Free-form style label, or ``"None"`` for no style.
    """

    model_config = ConfigDict(frozen=True)

    aspect_ratio: AspectRatio = "1:1"
    image_size: ImageSize = "1K"
    video_resolution: VideoResolution = "720p"
    style: str = NO_STYLE

    @property
    def has_style(self) -> bool:
        return bool(self.style) and self.style != NO_STYLE


def new_media_id() -> str:
    """Return a fresh random identifier for a gallery record."""
    return uuid.uuid4().hex


def now_millis() -> int:
    return int(time.time() * 1000)


class MediaItem(BaseModel):
    """A generated artifact as stored in the gallery.

    ``url`` holds a ``data:`` URI for images, a local media URL for videos,
    and the raw answer for text analysis.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_media_id)
    type: MediaType
    url: str
    prompt: str
    timestamp: int = Field(default_factory=now_millis)
    metadata: dict[str, Any] = Field(default_factory=dict)


@dataclass
class VideoOperation:
    """Transient handle for a video synthesis job.

    Attributes:
        done: Whether the backend reports a terminal state.
        error: Failure message reported by the backend, if any.
        locator: Download URI of the finished video, if any.
        handle: Opaque SDK object used to re-query the job.
    """

    done: bool
    error: str | None = None
    locator: str | None = None
    handle: Any = None
