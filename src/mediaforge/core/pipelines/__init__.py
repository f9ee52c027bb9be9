"""Request pipelines, one per generation mode.

Importing this package registers every pipeline with
:data:`pipeline_registry`.
"""

from .base import CancellationToken, PipelineBase, PipelineRequest, pipeline_registry
from .image_analysis import ImageAnalysisPipeline
from .image_edit import ImageEditPipeline
from .image_generation import ImageGenerationPipeline, ImageTier
from .video_generation import VideoGenerationPipeline

__all__ = [
    "CancellationToken",
    "ImageAnalysisPipeline",
    "ImageEditPipeline",
    "ImageGenerationPipeline",
    "ImageTier",
    "PipelineBase",
    "PipelineRequest",
    "VideoGenerationPipeline",
    "pipeline_registry",
]
