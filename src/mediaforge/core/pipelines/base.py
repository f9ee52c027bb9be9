"""Base classes and registry for request pipelines.

Each generation mode (image, video, edit, analyze) has its own pipeline that
implements a common interface while handling mode-specific backend calls.
The dispatcher never talks to the backend directly: it looks the pipeline up
in :data:`pipeline_registry` by mode, instantiates it with a backend bound to
the resolved credential, and awaits :meth:`PipelineBase.run`.

Pipeline Pattern
----------------
Every pipeline encapsulates:
- The fixed sequence of backend calls for its mode
- Interpretation of backend responses (image payload, text payload, job state)
- Mode-specific failures (no artifact, failed job, failed download)

Usage Example
-------------
    >>> from mediaforge.core.pipelines import pipeline_registry
    >>> pipeline = pipeline_registry.instantiate(GenerationType.IMAGE, backend, config)
    >>> url = await pipeline.run(PipelineRequest(prompt="a red fox", config=GenerationConfig()))
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..backend import GenAIBackend
from ..config import MediaForgeConfig
from ..exceptions import GenerationCancelled
from ..media import BlobStore, SourceImage
from ..models import GenerationConfig, GenerationType, MediaType

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation signal threaded through a dispatch."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise GenerationCancelled()

    async def sleep(self, seconds: float) -> None:
        """Wait ``seconds`` unless cancelled first.

        Raises:
            GenerationCancelled: If the token is cancelled before or during
                the wait.
        """
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise GenerationCancelled()


@dataclass
class PipelineRequest:
    """Inputs handed to a pipeline for one dispatch."""

    prompt: str
    config: GenerationConfig
    source: SourceImage | None = None
    mask: bytes | None = None


class PipelineBase(ABC):
    """Abstract base class for all request pipelines.

    Attributes
    ----------
    name : str
        Human-readable pipeline name
    mode : GenerationType
        Generation mode this pipeline serves
    media_type : MediaType
        Type of the gallery record produced on success
    requires_source : bool
        Whether a source image is mandatory for this mode
    default_prompt : str
        Gallery label used when the user left the prompt empty
    """

    name: str = "Base Pipeline"
    mode: GenerationType = GenerationType.IMAGE
    media_type: MediaType = "image"
    requires_source: bool = False
    default_prompt: str = "Untitled"

    def __init__(
        self,
        backend: GenAIBackend,
        config: MediaForgeConfig,
        blob_store: BlobStore | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        self.backend = backend
        self.config = config
        self.blob_store = blob_store or BlobStore(config.media_dir)
        self.token = token or CancellationToken()

    @abstractmethod
    async def run(self, request: PipelineRequest) -> str:
        """Execute the pipeline.

        Returns
        -------
        str
            Artifact payload: a data URI, a local media URL, or raw text.

        Raises
        ------
        GenerationError
            Mode-specific failure; transport errors propagate unchanged.
        """

    def get_pipeline_info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "mode": self.mode.value,
            "media_type": self.media_type,
            "requires_source": self.requires_source,
        }


class PipelineRegistry:
    """Registry mapping generation modes to pipeline classes."""

    def __init__(self) -> None:
        self._pipelines: dict[GenerationType, type[PipelineBase]] = {}

    def register(self, pipeline_class: type[PipelineBase]) -> type[PipelineBase]:
        """Register a pipeline class for its mode.

        Returns the class so it can be used as a decorator.
        """
        mode = pipeline_class.mode
        if mode in self._pipelines:
            logger.warning(f"Pipeline for mode '{mode.value}' is already registered, overwriting")

        self._pipelines[mode] = pipeline_class
        logger.debug(f"Registered pipeline: {pipeline_class.name} ({mode.value})")
        return pipeline_class

    def get_pipeline_class(self, mode: GenerationType) -> type[PipelineBase]:
        """Return the pipeline class for ``mode``.

        Raises
        ------
        KeyError
            If no pipeline is registered for ``mode``
        """
        if mode not in self._pipelines:
            available = ", ".join(m.value for m in self._pipelines)
            raise KeyError(f"No pipeline for mode '{mode.value}'. Available modes: {available}")
        return self._pipelines[mode]

    def instantiate(
        self,
        mode: GenerationType,
        backend: GenAIBackend,
        config: MediaForgeConfig,
        **kwargs: Any,
    ) -> PipelineBase:
        pipeline_class = self.get_pipeline_class(mode)
        return pipeline_class(backend, config, **kwargs)

    def list_available(self) -> list[GenerationType]:
        return list(self._pipelines.keys())


# Global pipeline registry instance
pipeline_registry = PipelineRegistry()
