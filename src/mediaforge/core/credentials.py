"""API credential storage and resolution.

A credential is one of two cases:

- :class:`LocalSecret` — a key the user pasted, held in durable storage and
  handed to every backend client explicitly.
- :class:`ExternalSelection` — the environment already provides a credential
  out-of-band (for example ``GEMINI_API_KEY`` read by the SDK itself).  No
  secret string is exposed; clients are built with an empty key.

:class:`CredentialResolver` only queries, it never prompts.  Acquiring a key
is the caller's job (see :class:`~mediaforge.core.studio.Studio`).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .storage import API_KEY_KEY, DurableStorage

logger = logging.getLogger(__name__)

# Environment variables the google-genai SDK reads on its own.
SDK_KEY_VARIABLES = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class LocalSecret:
    secret: str


@dataclass(frozen=True)
class ExternalSelection:
    pass


Credential = LocalSecret | ExternalSelection


@dataclass(frozen=True)
class CredentialStatus:
    """Result of a credential resolution.

    Attributes:
        active: Whether generation may proceed.
        credential: The resolved credential, or ``None`` when inactive.
    """

    active: bool
    credential: Credential | None = None

    @property
    def secret(self) -> str | None:
        if isinstance(self.credential, LocalSecret):
            return self.credential.secret
        return None

    @property
    def source(self) -> str | None:
        if isinstance(self.credential, LocalSecret):
            return "local"
        if isinstance(self.credential, ExternalSelection):
            return "external"
        return None


ExternalProvider = Callable[[], Awaitable[bool]]


async def environment_has_selected_key() -> bool:
    """Report whether the process environment carries an SDK API key."""
    return any(os.environ.get(name) for name in SDK_KEY_VARIABLES)


class CredentialStore:
    """Persists the locally supplied API secret."""

    def __init__(self, storage: DurableStorage) -> None:
        self._storage = storage

    def get(self) -> str | None:
        return self._storage.get_item(API_KEY_KEY) or None

    def set(self, secret: str) -> None:
        secret = secret.strip()
        if not secret:
            raise ValueError("API key must not be empty")
        self._storage.set_item(API_KEY_KEY, secret)
        logger.info("Stored local API key")

    def clear(self) -> None:
        self._storage.remove_item(API_KEY_KEY)
        logger.info("Cleared local API key")


class CredentialResolver:
    """Resolve the active credential from local storage or the environment.

    Args:
        store: Holder of the locally pasted secret.
        external_provider: Async callable answering whether a credential was
            selected out-of-band.  Defaults to checking the SDK environment
            variables.
    """

    def __init__(
        self,
        store: CredentialStore,
        external_provider: ExternalProvider | None = None,
    ) -> None:
        self._store = store
        self._external_provider = external_provider or environment_has_selected_key

    async def resolve(self) -> CredentialStatus:
        secret = self._store.get()
        if secret:
            return CredentialStatus(active=True, credential=LocalSecret(secret))

        try:
            selected = await self._external_provider()
        except Exception as e:
            # Treated as "not selected"; the caller re-prompts.
            logger.debug(f"External credential query failed: {e}")
            selected = False

        if selected:
            return CredentialStatus(active=True, credential=ExternalSelection())
        return CredentialStatus(active=False)
