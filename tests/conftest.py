"""Shared pytest fixtures for MediaForge tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from google.genai import types
from PIL import Image

from mediaforge.api.main import create_app
from mediaforge.core.backend import GenAIBackend
from mediaforge.core.config import MediaForgeConfig
from mediaforge.core.media import BlobStore, SourceImage
from mediaforge.core.models import GenerationConfig, VideoOperation
from mediaforge.core.storage import DurableStorage
from mediaforge.core.studio import Studio


def _make_png(color=(255, 0, 0, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


PNG_BYTES = _make_png()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> MediaForgeConfig:
    """Create a test configuration with temporary directories and fast polling.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        MediaForgeConfig instance for testing
    """
    return MediaForgeConfig(
        _env_file=None,
        data_dir=temp_dir / "data",
        media_dir=temp_dir / "media",
        poll_interval_seconds=0.01,
        max_poll_attempts=None,
        storage_quota_bytes=1024 * 1024,
    )


@pytest.fixture
def blob_store(test_config: MediaForgeConfig) -> BlobStore:
    return BlobStore(test_config.media_dir)


@pytest.fixture
def generation_config() -> GenerationConfig:
    return GenerationConfig(aspect_ratio="1:1", image_size="2K", style="None")


@pytest.fixture
def source_image() -> SourceImage:
    return SourceImage(data=PNG_BYTES, mime_type="image/png")


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def mock_backend() -> MagicMock:
    """A backend double whose network methods are AsyncMocks.

    Tests configure ``generate_content``, ``submit_video``, ``poll_video``
    and ``fetch`` return values or side effects as needed.
    """
    backend = MagicMock(spec=GenAIBackend)
    backend.api_key = "secret"
    backend.generate_content = AsyncMock()
    backend.submit_video = AsyncMock()
    backend.poll_video = AsyncMock()
    backend.fetch = AsyncMock(return_value=httpx.Response(200, content=b"video-bytes"))
    return backend


def _response(*parts: types.Part) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=list(parts)))]
    )


@pytest.fixture
def image_response() -> Callable[..., types.GenerateContentResponse]:
    """Factory for a response carrying one inline image."""

    def make(data: bytes = PNG_BYTES, mime_type: str = "image/png"):
        return _response(types.Part(inline_data=types.Blob(data=data, mime_type=mime_type)))

    return make


@pytest.fixture
def text_response() -> Callable[[str], types.GenerateContentResponse]:
    """Factory for a response carrying only text."""

    def make(text: str):
        return _response(types.Part(text=text))

    return make


@pytest.fixture
def empty_response() -> types.GenerateContentResponse:
    return types.GenerateContentResponse(candidates=[])


@pytest.fixture
def video_operation() -> Callable[..., VideoOperation]:
    """Factory for normalized video job handles."""

    def make(done: bool = False, error: str | None = None, locator: str | None = None):
        return VideoOperation(done=done, error=error, locator=locator, handle=object())

    return make


@pytest.fixture
def storage(test_config: MediaForgeConfig) -> DurableStorage:
    """Durable storage backed by a file in the temporary data directory."""
    return DurableStorage(test_config.data_dir / "storage.json", test_config.storage_quota_bytes)


async def _no_external_key() -> bool:
    return False


@pytest.fixture
def api_studio(test_config: MediaForgeConfig, mock_backend: MagicMock) -> Studio:
    """Studio wired to the mock backend with no environment credential."""
    return Studio(
        test_config,
        backend_factory=lambda key: mock_backend,
        external_provider=_no_external_key,
    )


@pytest.fixture
def test_client(test_config: MediaForgeConfig, api_studio: Studio) -> Generator[TestClient, None, None]:
    """FastAPI TestClient for the application built around ``api_studio``.

    Yields:
        TestClient with the lifespan started
    """
    app = create_app(test_config, studio=api_studio)
    with TestClient(app) as client:
        yield client
