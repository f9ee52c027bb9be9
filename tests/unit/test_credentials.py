"""Tests for mediaforge.core.credentials — local and out-of-band API keys."""

from __future__ import annotations

import asyncio

import pytest

from mediaforge.core.credentials import (
    CredentialResolver,
    CredentialStatus,
    CredentialStore,
    ExternalSelection,
    LocalSecret,
    environment_has_selected_key,
)


async def _selected() -> bool:
    return True


async def _not_selected() -> bool:
    return False


async def _broken() -> bool:
    raise RuntimeError("host bridge unavailable")


@pytest.fixture
def store(storage):
    return CredentialStore(storage)


class TestCredentialStore:
    """Persistence of the pasted API key."""

    def test_set_strips_whitespace(self, store):
        store.set("  abc123 \n")

        assert store.get() == "abc123"

    def test_blank_rejected(self, store):
        with pytest.raises(ValueError):
            store.set("   ")
        assert store.get() is None

    def test_clear(self, store):
        store.set("abc123")

        store.clear()

        assert store.get() is None


class TestCredentialResolver:
    """Resolution order: local secret, then external selection."""

    def test_local_secret_wins(self, store):
        store.set("abc123")

        status = asyncio.run(CredentialResolver(store, _selected).resolve())

        assert status.active
        assert status.credential == LocalSecret("abc123")
        assert status.secret == "abc123"
        assert status.source == "local"

    def test_external_selection(self, store):
        status = asyncio.run(CredentialResolver(store, _selected).resolve())

        assert status.active
        assert isinstance(status.credential, ExternalSelection)
        assert status.secret is None
        assert status.source == "external"

    def test_inactive(self, store):
        status = asyncio.run(CredentialResolver(store, _not_selected).resolve())

        assert status == CredentialStatus(active=False)
        assert status.source is None

    def test_provider_failure_treated_as_not_selected(self, store):
        status = asyncio.run(CredentialResolver(store, _broken).resolve())

        assert not status.active

    def test_disconnect_falls_back_to_external(self, store):
        resolver = CredentialResolver(store, _selected)
        store.set("abc123")
        store.clear()

        assert asyncio.run(resolver.resolve()).source == "external"


class TestEnvironmentProvider:
    """Default out-of-band provider."""

    def test_no_variables(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        assert asyncio.run(environment_has_selected_key()) is False

    @pytest.mark.parametrize("variable", ["GEMINI_API_KEY", "GOOGLE_API_KEY"])
    def test_variable_present(self, monkeypatch, variable):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv(variable, "env-key")

        assert asyncio.run(environment_has_selected_key()) is True

    def test_resolver_defaults_to_environment(self, store, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")

        assert asyncio.run(CredentialResolver(store).resolve()).source == "external"
