"""Asynchronous video synthesis with job polling.

State machine::

    Submitted -> Polling -> Succeeded | Failed

Submitting returns a job handle.  While the handle reports not-done, the
pipeline waits ``poll_interval_seconds`` and re-queries it.  The wait is
cooperative: the event loop stays free, but no other generation runs
because the dispatcher is single-flight.

Polling stops on the first handle that is done or carries an error.  The
wait can be interrupted through the dispatch's :class:`CancellationToken`,
and ``max_poll_attempts`` (when configured) bounds the number of re-queries.

On success the video is downloaded from the job's locator with the API key
appended as ``&key=<secret>`` and written to the media directory.
"""

from __future__ import annotations

import logging

from google.genai import types

from ..exceptions import DownloadFailed, JobFailed, JobTimedOut, NoDownloadLink
from ..models import GenerationType, VideoOperation
from .base import PipelineBase, PipelineRequest, pipeline_registry

logger = logging.getLogger(__name__)

VIDEO_RESOLUTION = "720p"
VERTICAL = "9:16"
HORIZONTAL = "16:9"


def video_aspect_ratio(aspect_ratio: str) -> str:
    """Pin any requested ratio to one of the two the video model accepts."""
    return VERTICAL if aspect_ratio == VERTICAL else HORIZONTAL


@pipeline_registry.register
class VideoGenerationPipeline(PipelineBase):
    """Submit a video job, poll it to a terminal state, and fetch the result."""

    name = "Video Generation"
    mode = GenerationType.VIDEO
    media_type = "video"

    async def run(self, request: PipelineRequest) -> str:
        operation = await self.submit(request)
        operation = await self.wait_for_completion(operation)
        return await self.download(operation)

    async def submit(self, request: PipelineRequest) -> VideoOperation:
        video_config = types.GenerateVideosConfig(
            number_of_videos=1,
            resolution=VIDEO_RESOLUTION,
            aspect_ratio=video_aspect_ratio(request.config.aspect_ratio),
        )
        logger.info(
            f"Submitting video job ({video_config.aspect_ratio}, "
            f"conditioned={request.source is not None})"
        )
        return await self.backend.submit_video(
            self.config.video_model,
            request.prompt,
            video_config,
            source=request.source,
        )

    async def wait_for_completion(self, operation: VideoOperation) -> VideoOperation:
        """Poll ``operation`` until it is done or reports an error.

        Raises:
            JobFailed: The backend reported an error.
            JobTimedOut: ``max_poll_attempts`` re-queries did not finish the job.
            GenerationCancelled: The dispatch was cancelled while waiting.
        """
        attempts = 0
        max_attempts = self.config.max_poll_attempts

        while not operation.done and not operation.error:
            if max_attempts is not None and attempts >= max_attempts:
                raise JobTimedOut(f"Video generation timed out after {attempts} status checks.")

            await self.token.sleep(self.config.poll_interval_seconds)
            operation = await self.backend.poll_video(operation)
            attempts += 1
            logger.debug(f"Video job poll #{attempts}: done={operation.done}")

        if operation.error:
            raise JobFailed(f"Video generation failed: {operation.error}")

        logger.info(f"Video job finished after {attempts} status checks")
        return operation

    async def download(self, operation: VideoOperation) -> str:
        if not operation.locator:
            raise NoDownloadLink("No download link returned.")

        response = await self.backend.fetch(f"{operation.locator}&key={self.backend.api_key}")
        if not response.is_success:
            logger.error(f"Video download returned HTTP {response.status_code}")
            raise DownloadFailed("Video download failed.")

        return await self.blob_store.save(response.content, suffix=".mp4")
