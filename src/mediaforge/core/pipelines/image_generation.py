"""Text-to-image pipeline with an ordered chain of fallback tiers.

Backend model availability is not guaranteed, so generation walks a list of
:class:`ImageTier` entries in order.  A tier that raises or answers without
an image is logged and the next tier is tried.  Only the last tier's outcome
reaches the user:

- an inline image wins and is returned as a ``data:`` URI
- a text-only answer is the backend's explanation and becomes the error
- nothing at all raises :class:`NoArtifactReturned`

Default chain
-------------
1. ``pro_image_model`` with aspect ratio and image size
2. ``flash_image_model`` with aspect ratio only
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from google.genai import types

from ..backend import describe_error, first_inline_image, first_text
from ..exceptions import ModelUnavailable, NoArtifactReturned
from ..models import GenerationConfig, GenerationType
from .base import PipelineBase, PipelineRequest, pipeline_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageTier:
    """One backend model attempt in the fallback chain.

    Attributes:
        label: Name used in logs.
        model: Backend model identifier.
        with_image_size: Whether the model accepts an explicit image size.
    """

    label: str
    model: str
    with_image_size: bool

    def image_config(self, config: GenerationConfig) -> types.ImageConfig:
        if self.with_image_size:
            return types.ImageConfig(
                aspect_ratio=config.aspect_ratio,
                image_size=config.image_size,
            )
        return types.ImageConfig(aspect_ratio=config.aspect_ratio)


def styled_prompt(prompt: str, config: GenerationConfig) -> str:
    if config.has_style:
        return f"{prompt}. Artistic Style: {config.style}"
    return prompt


@pipeline_registry.register
class ImageGenerationPipeline(PipelineBase):
    """Generate an image from a prompt, falling back across model tiers."""

    name = "Image Generation"
    mode = GenerationType.IMAGE
    media_type = "image"

    @property
    def tiers(self) -> list[ImageTier]:
        return [
            ImageTier("pro", self.config.pro_image_model, with_image_size=True),
            ImageTier("flash", self.config.flash_image_model, with_image_size=False),
        ]

    async def run(self, request: PipelineRequest) -> str:
        prompt = styled_prompt(request.prompt, request.config)
        tiers = self.tiers

        for index, tier in enumerate(tiers):
            self.token.raise_if_cancelled()
            is_last = index == len(tiers) - 1
            logger.info(f"Generating image with {tier.label} tier ({request.config.image_size})")

            try:
                response = await self.backend.generate_content(
                    tier.model,
                    [types.Part.from_text(text=prompt)],
                    image_config=tier.image_config(request.config),
                )
            except Exception as e:
                if is_last:
                    raise
                unavailable = ModelUnavailable(f"{tier.label} tier unavailable: {describe_error(e)}")
                logger.warning(f"{unavailable}, falling back")
                continue

            image_url = first_inline_image(response)
            if image_url:
                return image_url

            if is_last:
                text = first_text(response)
                if text:
                    raise NoArtifactReturned(text)
            else:
                logger.warning(f"{tier.label} tier returned no image, falling back")

        raise NoArtifactReturned("No data received.")
