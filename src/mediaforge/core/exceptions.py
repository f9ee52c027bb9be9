"""Exceptions raised by the generation orchestration layer.

Every failure a dispatch can produce is a :class:`GenerationError`. Its
string form is the human-readable message shown to the user.
"""


class GenerationError(Exception):
    """Base exception for generation failures."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class CredentialRequired(GenerationError):
    """Raised when no usable API credential is available."""

    def __init__(self, message: str = "An API key is required to generate.") -> None:
        super().__init__(message)


class MissingInput(GenerationError):
    """Raised when a mode needs a source image and none was supplied."""


class DispatcherBusy(GenerationError):
    """Raised when a dispatch is attempted while another is in flight."""

    def __init__(self, message: str = "A generation is already in progress.") -> None:
        super().__init__(message)


class ModelUnavailable(GenerationError):
    """A non-final fallback tier failed. Absorbed by the pipeline."""


class NoArtifactReturned(GenerationError):
    """The backend responded without an image."""


class NoDownloadLink(GenerationError):
    """A finished video job carried no download locator."""


class DownloadFailed(GenerationError):
    """Fetching the finished video returned a non-success response."""


class JobFailed(GenerationError):
    """The backend reported a video job failure."""


class JobTimedOut(JobFailed):
    """A video job exceeded the configured poll ceiling."""


class GenerationCancelled(GenerationError):
    """The in-flight dispatch was cancelled by the caller."""

    def __init__(self, message: str = "Generation cancelled.") -> None:
        super().__init__(message)


class GenerationFailed(GenerationError):
    """Uniform failure surfaced by the dispatcher for any pipeline error."""


class StorageQuotaExceeded(GenerationError):
    """A durable storage write would exceed the storage capacity."""
