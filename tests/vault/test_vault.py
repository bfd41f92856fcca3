"""
Unit tests for CredentialVault.

Tests store/retrieve/revalidate/remove/status with an in-memory credential
store and a mocked upstream provider.
"""

from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from chat_orchestrator.exceptions import InvalidCredentialError
from chat_orchestrator.models import CredentialRecord
from chat_orchestrator.storage.credentials.memory import InMemoryCredentialStore
from chat_orchestrator.vault import CredentialCipher, CredentialVault


@pytest.fixture
def cipher():
    return CredentialCipher.from_secret("test-secret", "test-salt", iterations=1000)


@pytest.fixture
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture
def mock_upstream():
    """Upstream that accepts every key."""
    upstream = Mock()
    upstream.list_models = AsyncMock(return_value=["gpt-4o-mini", "gpt-3.5-turbo"])
    return upstream


@pytest.fixture
def vault(cipher, credential_store, mock_upstream):
    return CredentialVault(cipher, credential_store, mock_upstream)


@pytest.mark.asyncio
async def test_store_valid_key(vault, credential_store):
    """Test storing a key that passes validation."""
    result = await vault.store("user1", "sk-valid")

    assert result.success is True
    assert result.valid is True
    assert result.models_available == ["gpt-4o-mini", "gpt-3.5-turbo"]

    record = credential_store.get("user1")
    assert record.is_valid is True
    assert record.last_validated_at is not None
    assert "sk-valid" not in record.encrypted_payload


@pytest.mark.asyncio
async def test_store_invalid_key_still_persisted(vault, credential_store, mock_upstream):
    """Test that a key failing validation is stored but flagged invalid."""
    mock_upstream.list_models.side_effect = InvalidCredentialError(
        "Incorrect API key provided", code="invalid_api_key"
    )

    result = await vault.store("user1", "sk-bad")

    assert result.success is True
    assert result.valid is False
    assert result.models_available == []
    assert credential_store.get("user1").is_valid is False


@pytest.mark.asyncio
async def test_store_rejects_empty_secret(vault):
    """Test that empty secrets are rejected before encryption."""
    with pytest.raises(ValueError):
        await vault.store("user1", "   ")


@pytest.mark.asyncio
async def test_store_replaces_previous_key(vault):
    """Test that storing again replaces the credential."""
    await vault.store("user1", "sk-first")
    await vault.store("user1", "sk-second")

    assert vault.retrieve("user1") == "sk-second"


@pytest.mark.asyncio
async def test_retrieve_valid_key(vault):
    """Test retrieving a valid key returns the raw secret."""
    await vault.store("user1", "sk-valid")

    assert vault.retrieve("user1") == "sk-valid"


def test_retrieve_missing_key(vault):
    """Test retrieving for an unknown owner returns None."""
    assert vault.retrieve("nobody") is None


@pytest.mark.asyncio
async def test_retrieve_invalid_key_returns_none(vault, mock_upstream):
    """Test that a key whose last validation failed is never handed out."""
    mock_upstream.list_models.side_effect = InvalidCredentialError("bad key")
    await vault.store("user1", "sk-bad")

    assert vault.retrieve("user1") is None


def test_retrieve_undecryptable_returns_none(vault, credential_store):
    """Test that a corrupted payload yields None rather than raising."""
    credential_store.save(
        CredentialRecord(
            owner_id="user1",
            encrypted_payload="00:11:22",
            is_valid=True,
            last_validated_at=datetime.now(),
        )
    )

    assert vault.retrieve("user1") is None


@pytest.mark.asyncio
async def test_revalidate_updates_validity(vault, mock_upstream):
    """Test revalidation records a changed validity."""
    await vault.store("user1", "sk-valid")
    mock_upstream.list_models.side_effect = InvalidCredentialError("revoked")

    result = await vault.revalidate("user1")

    assert result.valid is False
    assert result.error == "revoked"
    assert vault.retrieve("user1") is None

    mock_upstream.list_models.side_effect = None
    result = await vault.revalidate("user1")

    assert result.valid is True
    assert vault.retrieve("user1") == "sk-valid"


@pytest.mark.asyncio
async def test_revalidate_without_key(vault, mock_upstream):
    """Test revalidating an unknown owner reports no key."""
    result = await vault.revalidate("nobody")

    assert result.valid is False
    assert result.error == "No API key found"
    mock_upstream.list_models.assert_not_called()


@pytest.mark.asyncio
async def test_remove(vault):
    """Test removing a credential."""
    await vault.store("user1", "sk-valid")

    result = vault.remove("user1")

    assert result.success is True
    assert vault.retrieve("user1") is None
    assert vault.status("user1").has_key is False


@pytest.mark.asyncio
async def test_status(vault):
    """Test status reporting."""
    status = vault.status("user1")
    assert status.has_key is False
    assert status.valid is False

    await vault.store("user1", "sk-valid")

    status = vault.status("user1")
    assert status.has_key is True
    assert status.valid is True
    assert status.last_validated_at is not None
