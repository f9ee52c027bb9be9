"""Pydantic request and response models for the MediaForge API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Models
------
GenerateRequest
    Payload for ``POST /api/generate`` — mode, prompt, generation options,
    and the optional source image and mask as base64 data URLs.
CredentialRequest
    Payload for ``POST /api/credential`` — a pasted API key.
CredentialStatusResponse
    Response of the credential endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from mediaforge.core.models import (
    AspectRatio,
    GenerationConfig,
    GenerationType,
    ImageSize,
    VideoResolution,
)


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        mode: Generation mode (``IMAGE``, ``VIDEO``, ``EDIT``, ``ANALYZE``).
        prompt: Prompt, edit instruction, or analysis question.  May be empty.
        aspect_ratio: Output aspect ratio.
        image_size: Output size for image generation.
        video_resolution: Requested video resolution.
        style: Style label, or ``"None"``.
        source_image: Base64 data URL of the source image.  Required for
            ``EDIT`` and ``ANALYZE``; optional conditioning image for
            ``VIDEO``.
        mask_image: Base64 data URL of the edit mask (``EDIT`` only).
    """

    mode: GenerationType = Field(..., description="Generation mode.")
    prompt: str = Field(default="", description="Prompt text (may be empty).")
    aspect_ratio: AspectRatio = Field(default="1:1", description="Aspect ratio.")
    image_size: ImageSize = Field(default="1K", description="Image size (1K, 2K, 4K).")
    video_resolution: VideoResolution = Field(default="720p", description="Video resolution.")
    style: str = Field(default="None", description="Style label, or 'None'.")
    source_image: str | None = Field(
        default=None,
        description="Source image as a base64 data URL.",
    )
    mask_image: str | None = Field(
        default=None,
        description="Edit mask as a base64 data URL.",
    )

    def generation_config(self) -> GenerationConfig:
        return GenerationConfig(
            aspect_ratio=self.aspect_ratio,
            image_size=self.image_size,
            video_resolution=self.video_resolution,
            style=self.style,
        )


class CredentialRequest(BaseModel):
    """Request body for the ``POST /api/credential`` endpoint."""

    api_key: str = Field(..., min_length=1, description="API key to store locally.")


class CredentialStatusResponse(BaseModel):
    """Credential status as reported to the frontend.

    Attributes:
        active: Whether generation may proceed.
        source: ``"local"`` for a pasted key, ``"external"`` for an
            environment credential, ``None`` when inactive.
    """

    active: bool
    source: str | None = None
