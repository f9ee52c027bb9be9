"""MediaForge - Gemini image, video, edit, and analysis generation service."""

__version__ = "0.1.0"

from mediaforge.core.config import MediaForgeConfig, config
from mediaforge.core.pipelines import PipelineBase, pipeline_registry
from mediaforge.core.studio import Studio

__all__ = [
    "MediaForgeConfig",
    "PipelineBase",
    "Studio",
    "config",
    "pipeline_registry",
]
