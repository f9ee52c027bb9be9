"""Routing of generation requests to pipelines.

:class:`GenerationDispatcher` is the single entry point for producing a
:class:`~mediaforge.core.models.MediaItem`.  For every dispatch it:

1. Takes the single-flight token (a concurrent dispatch raises
   :class:`DispatcherBusy`).
2. Resolves the credential; no usable credential raises
   :class:`CredentialRequired`.
3. Checks that modes needing a source image have one, before any network
   call, raising :class:`MissingInput` otherwise.
4. Builds a backend bound to the resolved secret and runs the pipeline
   registered for the mode.
5. Wraps the payload into a MediaItem, or converts any pipeline failure into
   :class:`GenerationFailed` carrying the deepest human-readable message.
   A cancelled dispatch raises :class:`GenerationCancelled` unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import contextmanager

from .backend import GenAIBackend, describe_error
from .config import MediaForgeConfig
from .credentials import CredentialResolver
from .exceptions import (
    CredentialRequired,
    DispatcherBusy,
    GenerationCancelled,
    GenerationFailed,
    MissingInput,
)
from .media import BlobStore, SourceImage
from .models import GenerationConfig, GenerationType, MediaItem
from .pipelines import CancellationToken, PipelineRequest, pipeline_registry

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str], GenAIBackend]

MISSING_SOURCE_MESSAGES = {
    GenerationType.EDIT: "Please upload an image to edit.",
    GenerationType.ANALYZE: "Please upload an image to analyze.",
}


class SingleFlightGuard:
    """Holds at most one in-flight token at a time.

    Acquisition is a plain check-and-set; it is atomic under asyncio because
    nothing awaits between the check and the set.
    """

    def __init__(self) -> None:
        self._token: CancellationToken | None = None

    @property
    def busy(self) -> bool:
        return self._token is not None

    @property
    def current(self) -> CancellationToken | None:
        return self._token

    @contextmanager
    def acquire(self):
        if self._token is not None:
            raise DispatcherBusy()
        token = CancellationToken()
        self._token = token
        try:
            yield token
        finally:
            self._token = None


class GenerationDispatcher:
    """Dispatch generation requests to the pipeline for their mode.

    Args:
        config: Application configuration.
        resolver: Credential resolver queried at the start of each dispatch.
        backend_factory: Builds a backend for a secret.  Defaults to
            :class:`GenAIBackend`.
        blob_store: Destination for downloaded video files.
    """

    def __init__(
        self,
        config: MediaForgeConfig,
        resolver: CredentialResolver,
        backend_factory: BackendFactory | None = None,
        blob_store: BlobStore | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.backend_factory = backend_factory or (lambda key: GenAIBackend(key, config))
        self.blob_store = blob_store or BlobStore(config.media_dir)
        self._guard = SingleFlightGuard()

    @property
    def is_busy(self) -> bool:
        return self._guard.busy

    def cancel(self) -> bool:
        """Cancel the in-flight dispatch, if any.

        Returns:
            True if a dispatch was running and has been signalled.
        """
        token = self._guard.current
        if token is None:
            return False
        logger.info("Cancelling in-flight generation")
        token.cancel()
        return True

    async def dispatch(
        self,
        mode: GenerationType,
        prompt: str,
        config: GenerationConfig,
        source: SourceImage | None = None,
        mask: bytes | None = None,
    ) -> MediaItem:
        mode = GenerationType(mode)
        with self._guard.acquire() as token:
            status = await self.resolver.resolve()
            if not status.active:
                raise CredentialRequired()

            pipeline_class = pipeline_registry.get_pipeline_class(mode)
            if pipeline_class.requires_source and source is None:
                raise MissingInput(MISSING_SOURCE_MESSAGES.get(mode, "A source image is required."))

            backend = self.backend_factory(status.secret or "")
            pipeline = pipeline_class(
                backend, self.config, blob_store=self.blob_store, token=token
            )
            request = PipelineRequest(prompt=prompt, config=config, source=source, mask=mask)

            logger.info(f"Dispatching {mode.value} via {pipeline.name} ({status.source} credential)")
            try:
                payload = await pipeline.run(request)
            except GenerationCancelled:
                logger.info(f"{pipeline.name} cancelled")
                raise
            except Exception as e:
                message = describe_error(e)
                logger.error(f"{pipeline.name} failed: {message}", exc_info=True)
                raise GenerationFailed(message) from e

            item = MediaItem(
                type=pipeline.media_type,
                url=payload,
                prompt=prompt or pipeline.default_prompt,
                metadata={"config": config.model_dump(), "mode": mode.value},
            )
            logger.info(f"Created {item.type} item {item.id}")
            return item
