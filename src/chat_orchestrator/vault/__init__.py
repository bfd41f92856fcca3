"""Encrypted per-user credential management."""

from chat_orchestrator.vault.cipher import CredentialCipher, derive_key
from chat_orchestrator.vault.vault import CredentialVault

__all__ = [
    "CredentialCipher",
    "CredentialVault",
    "derive_key",
]
