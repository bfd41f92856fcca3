"""
Credential vault.

Protects per-user third-party credentials at rest and brokers validated
access to them. Encryption and validation are decoupled: a credential is
stored even when the live check fails, but retrieve() never hands back a
credential whose last validation was negative.
"""

import logging
from datetime import datetime
from typing import Optional

from chat_orchestrator.exceptions import DecryptionError
from chat_orchestrator.models import (
    CredentialRecord,
    CredentialStatus,
    OperationResult,
    StoreResult,
    ValidationResult,
)
from chat_orchestrator.storage.protocols import CredentialStore
from chat_orchestrator.upstream.protocol import UpstreamProvider
from chat_orchestrator.vault.cipher import CredentialCipher

logger = logging.getLogger(__name__)


class CredentialVault:
    def __init__(
        self,
        cipher: CredentialCipher,
        store: CredentialStore,
        upstream: UpstreamProvider,
    ):
        self.cipher = cipher
        self.records = store
        self.upstream = upstream

    def encrypt(self, raw_secret: str) -> str:
        return self.cipher.encrypt(raw_secret)

    def decrypt(self, encrypted_payload: str) -> str:
        return self.cipher.decrypt(encrypted_payload)

    async def validate_upstream(self, raw_secret: str) -> ValidationResult:
        """Check the secret against the provider's model listing. Never raises."""
        try:
            models = await self.upstream.list_models(raw_secret)
        except Exception as e:
            logger.warning(f"API key validation failed: {e}")
            return ValidationResult(valid=False, error=str(e))

        return ValidationResult(valid=True, models_available=models)

    async def store(self, owner_id: str, raw_secret: str) -> StoreResult:
        """Encrypt, validate and persist a credential, replacing any previous one."""
        if not owner_id:
            raise ValueError("owner_id is required")
        if not raw_secret or not raw_secret.strip():
            raise ValueError("API key must not be empty")

        encrypted = self.encrypt(raw_secret)
        validation = await self.validate_upstream(raw_secret)

        self.records.save(
            CredentialRecord(
                owner_id=owner_id,
                encrypted_payload=encrypted,
                is_valid=validation.valid,
                last_validated_at=datetime.now(),
            )
        )

        logger.info(f"API key stored for owner {owner_id}, valid: {validation.valid}")

        return StoreResult(
            success=True,
            valid=validation.valid,
            models_available=validation.models_available,
        )

    def _decrypt_record(self, record: CredentialRecord) -> Optional[str]:
        try:
            return self.decrypt(record.encrypted_payload)
        except DecryptionError as e:
            logger.error(f"Stored API key for owner {record.owner_id} could not be decrypted: {e}")
            return None

    def retrieve(self, owner_id: str) -> Optional[str]:
        """
        Return the owner's raw secret.

        Returns None, rather than raising, when there is no record, the last
        validation failed, or the stored payload cannot be decrypted. Callers
        treat None as "no usable credential".
        """
        record = self.records.get(owner_id)
        if record is None:
            return None

        if not record.is_valid:
            logger.warning(f"Owner {owner_id} has invalid API key")
            return None

        return self._decrypt_record(record)

    async def revalidate(self, owner_id: str) -> ValidationResult:
        """Re-run validation with the stored secret and record the outcome."""
        record = self.records.get(owner_id)
        secret = self._decrypt_record(record) if record is not None else None
        now = datetime.now()

        if secret is None:
            if record is not None:
                self.records.set_validation(owner_id, False, now)
            return ValidationResult(valid=False, error="No API key found")

        validation = await self.validate_upstream(secret)
        self.records.set_validation(owner_id, validation.valid, now)

        logger.info(f"API key revalidated for owner {owner_id}, valid: {validation.valid}")

        return validation

    def remove(self, owner_id: str) -> OperationResult:
        self.records.delete(owner_id)
        logger.info(f"API key removed for owner {owner_id}")
        return OperationResult(success=True)

    def status(self, owner_id: str) -> CredentialStatus:
        record = self.records.get(owner_id)
        if record is None:
            return CredentialStatus(has_key=False, valid=False)

        return CredentialStatus(
            has_key=True,
            valid=record.is_valid,
            last_validated_at=record.last_validated_at,
        )
