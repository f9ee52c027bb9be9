"""Instruction-based image editing, optionally scoped by a mask.

The request always carries the source image.  With a mask, the mask follows
as a PNG part and the instruction is rewritten to confine the edit to the
highlighted region; without one, the instruction is sent as-is and applies
to the whole image.
"""

from __future__ import annotations

import logging

from google.genai import types

from ..backend import first_inline_image, first_text
from ..exceptions import MissingInput, NoArtifactReturned
from ..media import PNG_MIME, encode_mask_png
from ..models import GenerationType
from .base import PipelineBase, PipelineRequest, pipeline_registry

logger = logging.getLogger(__name__)

MASKED_INSTRUCTION = (
    "The second image provided is a highlight mask indicating the area to be edited. "
    "Please modify only the highlighted region according to this instruction: {prompt}. "
    "Maintain the rest of the image exactly as it is."
)


def build_edit_parts(request: PipelineRequest) -> list[types.Part]:
    """Assemble source, optional mask, and instruction parts."""
    if request.source is None:
        raise MissingInput("Please upload an image to edit.")

    parts = [types.Part.from_bytes(data=request.source.data, mime_type=request.source.mime_type)]

    if request.mask:
        parts.append(types.Part.from_bytes(data=encode_mask_png(request.mask), mime_type=PNG_MIME))
        parts.append(types.Part.from_text(text=MASKED_INSTRUCTION.format(prompt=request.prompt)))
    else:
        parts.append(types.Part.from_text(text=request.prompt))

    return parts


@pipeline_registry.register
class ImageEditPipeline(PipelineBase):
    """Edit an uploaded image with a single backend call."""

    name = "Image Edit"
    mode = GenerationType.EDIT
    media_type = "image"
    requires_source = True

    async def run(self, request: PipelineRequest) -> str:
        parts = build_edit_parts(request)
        logger.info(f"Editing image (masked={bool(request.mask)})")

        response = await self.backend.generate_content(self.config.flash_image_model, parts)

        image_url = first_inline_image(response)
        if image_url:
            return image_url

        text = first_text(response)
        if text:
            raise NoArtifactReturned(text)
        raise NoArtifactReturned("No edit data received.")
