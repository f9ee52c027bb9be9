"""Session object tying credentials, dispatch, gallery, and notifications.

:class:`Studio` is the caller the dispatcher expects: it turns dispatch
outcomes into gallery records and user notifications, and owns the
credential connect/disconnect actions and the confirmed gallery clear.
"""

from __future__ import annotations

import logging

from .config import MediaForgeConfig
from .credentials import CredentialResolver, CredentialStatus, CredentialStore, ExternalProvider
from .dispatcher import BackendFactory, GenerationDispatcher
from .exceptions import CredentialRequired, GenerationCancelled, GenerationError, StorageQuotaExceeded
from .gallery_store import GalleryStore
from .media import BlobStore, SourceImage
from .models import GenerationConfig, GenerationType, MediaItem
from .notifications import BufferedNotificationSink, NotificationSink
from .storage import API_KEY_KEY, DurableStorage

logger = logging.getLogger(__name__)

STORAGE_FILENAME = "storage.json"


class Studio:
    """Generation session state.

    Attributes:
        storage: Durable key/value storage shared by gallery and credential.
        credentials: Local API key holder.
        resolver: Credential resolver.
        dispatcher: Single-flight generation dispatcher.
        gallery: Persisted result log.
        sink: Notification receiver.
    """

    def __init__(
        self,
        config: MediaForgeConfig,
        sink: NotificationSink | None = None,
        backend_factory: BackendFactory | None = None,
        external_provider: ExternalProvider | None = None,
    ) -> None:
        self.config = config
        self.storage = DurableStorage(config.data_dir / STORAGE_FILENAME, config.storage_quota_bytes)
        self.credentials = CredentialStore(self.storage)
        self.resolver = CredentialResolver(self.credentials, external_provider)
        self.dispatcher = GenerationDispatcher(
            config,
            self.resolver,
            backend_factory=backend_factory,
            blob_store=BlobStore(config.media_dir),
        )
        self.gallery = GalleryStore(self.storage)
        self.sink = sink or BufferedNotificationSink()

        self.gallery.load()
        logger.info(f"Studio ready ({len(self.gallery)} gallery items)")

    @property
    def is_generating(self) -> bool:
        return self.dispatcher.is_busy

    async def credential_status(self) -> CredentialStatus:
        return await self.resolver.resolve()

    def connect(self, secret: str) -> None:
        """Store a pasted API key, evicting old gallery records if storage is full.

        Raises:
            ValueError: If the key is blank.
            StorageQuotaExceeded: If the key cannot fit even with the gallery
                emptied.
        """
        secret = secret.strip()
        while True:
            try:
                self.credentials.set(secret)
                break
            except StorageQuotaExceeded as e:
                if not self.storage.fits_alone(API_KEY_KEY, secret) or not self.gallery.evict_oldest():
                    self.sink.notify(str(e), "error")
                    raise
        self.sink.notify("API key activated!", "success")

    def disconnect(self) -> None:
        self.credentials.clear()
        self.sink.notify("API key disconnected", "info")

    async def generate(
        self,
        mode: GenerationType,
        prompt: str,
        config: GenerationConfig,
        source: SourceImage | None = None,
        mask: bytes | None = None,
    ) -> MediaItem:
        """Dispatch a request and record its outcome.

        Raises:
            GenerationError: Re-raised after the user was notified.
        """
        try:
            item = await self.dispatcher.dispatch(mode, prompt, config, source=source, mask=mask)
        except CredentialRequired:
            self.sink.notify("Please enter your API key to continue", "info")
            raise
        except GenerationCancelled as e:
            self.sink.notify(str(e), "info")
            raise
        except GenerationError as e:
            self.sink.notify(str(e) or "An unexpected error occurred", "error")
            raise

        self.gallery.prepend(item)
        self.sink.notify("Creation complete!", "success")
        return item

    def cancel(self) -> bool:
        return self.dispatcher.cancel()

    def clear_gallery(self, confirmed: bool) -> bool:
        """Clear the gallery if the user confirmed it.

        Returns:
            True if the gallery was cleared.
        """
        if not confirmed:
            return False
        self.gallery.clear()
        self.sink.notify("Gallery cleared", "info")
        return True
