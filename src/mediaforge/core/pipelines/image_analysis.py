"""Free-text question answering about an uploaded image."""

from __future__ import annotations

import logging

from google.genai import types

from ..exceptions import MissingInput
from ..models import GenerationType
from .base import PipelineBase, PipelineRequest, pipeline_registry

logger = logging.getLogger(__name__)

DEFAULT_QUESTION = "Analyze this image in detail."
NO_ANALYSIS = "No analysis provided."


@pipeline_registry.register
class ImageAnalysisPipeline(PipelineBase):
    """Answer a question about an image. Empty answers become a placeholder."""

    name = "Image Analysis"
    mode = GenerationType.ANALYZE
    media_type = "text"
    requires_source = True
    default_prompt = "Image Analysis"

    async def run(self, request: PipelineRequest) -> str:
        if request.source is None:
            raise MissingInput("Please upload an image to analyze.")

        parts = [
            types.Part.from_bytes(data=request.source.data, mime_type=request.source.mime_type),
            types.Part.from_text(text=request.prompt or DEFAULT_QUESTION),
        ]
        logger.info(f"Analyzing image with {self.config.analysis_model}")
        response = await self.backend.generate_content(self.config.analysis_model, parts)

        return response.text or NO_ANALYSIS
