"""
AES-256-GCM encryption for stored credentials.

Payloads are serialised as ``"<iv>:<auth tag>:<ciphertext>"`` with each
component hex-encoded. A fresh 96-bit IV is drawn for every encryption.
"""

import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from chat_orchestrator.exceptions import DecryptionError, EncryptionError

logger = logging.getLogger(__name__)

IV_SIZE = 12
TAG_SIZE = 16


def derive_key(secret: str, salt: str, iterations: int = 100_000) -> bytes:
    """Derive a 32-byte AES key from a configured secret using PBKDF2."""
    if not secret:
        raise EncryptionError("Encryption key is not configured")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt.encode(),
        iterations=iterations,
    )
    return kdf.derive(secret.encode())


class CredentialCipher:
    """Authenticated symmetric cipher for credential payloads."""

    def __init__(self, key: bytes):
        if len(key) != 32:
            raise EncryptionError(f"AES-256 requires a 32-byte key, got {len(key)} bytes")
        self._key = key

    @classmethod
    def from_secret(cls, secret: str, salt: str, iterations: int = 100_000) -> "CredentialCipher":
        return cls(derive_key(secret, salt, iterations))

    def encrypt(self, raw_secret: str) -> str:
        """
        Encrypt a raw secret.

        Raises:
            EncryptionError: If the cipher cannot be initialised or run
        """
        try:
            iv = os.urandom(IV_SIZE)
            encryptor = Cipher(algorithms.AES(self._key), modes.GCM(iv)).encryptor()
            ciphertext = encryptor.update(raw_secret.encode("utf-8")) + encryptor.finalize()
        except (ValueError, TypeError) as e:
            logger.error(f"Credential encryption failed: {type(e).__name__}")
            raise EncryptionError("Failed to encrypt API key", details=str(e)) from e

        return ":".join([iv.hex(), encryptor.tag.hex(), ciphertext.hex()])

    def decrypt(self, payload: str) -> str:
        """
        Decrypt a payload produced by encrypt().

        Raises:
            DecryptionError: If the payload is malformed, tampered with, or
                was encrypted under a different key
        """
        parts = payload.split(":") if isinstance(payload, str) else []
        if len(parts) != 3:
            raise DecryptionError("Invalid encrypted data format")

        try:
            iv, tag, ciphertext = (bytes.fromhex(part) for part in parts)
        except ValueError as e:
            raise DecryptionError("Invalid encrypted data format", details=str(e)) from e

        if len(iv) != IV_SIZE or len(tag) != TAG_SIZE:
            raise DecryptionError("Invalid encrypted data format")

        try:
            decryptor = Cipher(algorithms.AES(self._key), modes.GCM(iv, tag)).decryptor()
            plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        except InvalidTag as e:
            raise DecryptionError("Failed to decrypt API key", details="authentication failed") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Failed to decrypt API key", details=str(e)) from e
