"""
In-memory credential storage implementation.

Suitable for testing and single-instance deployments. Records are lost on
restart; use the SQLAlchemy implementation for persistence.
"""

import logging
from datetime import datetime
from typing import Dict, Optional

from chat_orchestrator.models import CredentialRecord

logger = logging.getLogger(__name__)


class InMemoryCredentialStore:
    """In-memory implementation of the CredentialStore protocol."""

    def __init__(self):
        self._records: Dict[str, CredentialRecord] = {}

        logger.info("InMemoryCredentialStore initialized")

    def save(self, record: CredentialRecord) -> None:
        self._records[record.owner_id] = record.model_copy()
        logger.debug(f"Saved credential for owner {record.owner_id}")

    def get(self, owner_id: str) -> Optional[CredentialRecord]:
        record = self._records.get(owner_id)
        return record.model_copy() if record is not None else None

    def set_validation(self, owner_id: str, is_valid: bool, validated_at: datetime) -> bool:
        record = self._records.get(owner_id)
        if record is None:
            logger.warning(f"Cannot update validation for owner {owner_id}: not found")
            return False

        self._records[owner_id] = record.model_copy(
            update={"is_valid": is_valid, "last_validated_at": validated_at}
        )
        return True

    def delete(self, owner_id: str) -> bool:
        if owner_id not in self._records:
            return False

        del self._records[owner_id]
        logger.info(f"Deleted credential for owner {owner_id}")
        return True
