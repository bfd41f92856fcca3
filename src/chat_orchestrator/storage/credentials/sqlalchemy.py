"""
SQLAlchemy-based credential storage implementation.

Works with any SQLAlchemy-compatible database (PostgreSQL, SQLite, MySQL,
etc.). Only ciphertext is persisted; raw secrets never reach the database.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, Engine, String, Text
from sqlalchemy.orm import Session, declarative_base

from chat_orchestrator.models import CredentialRecord

logger = logging.getLogger(__name__)

Base = declarative_base()


class CredentialDB(Base):
    """SQLAlchemy model for credential storage."""

    __tablename__ = "credentials"

    owner_id = Column(String, primary_key=True)
    encrypted_payload = Column(Text, nullable=False)
    is_valid = Column(Boolean, nullable=False, default=False)
    last_validated_at = Column(DateTime, nullable=True)

    def to_record(self) -> CredentialRecord:
        """Convert database model to CredentialRecord."""
        return CredentialRecord(
            owner_id=self.owner_id,
            encrypted_payload=self.encrypted_payload,
            is_valid=self.is_valid,
            last_validated_at=self.last_validated_at,
        )


class SQLAlchemyCredentialStore:
    """
    SQLAlchemy-based credential storage.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///credentials.db")
        store = SQLAlchemyCredentialStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Args:
            engine: Engine for the database holding the credentials table
        """
        self.engine = engine
        logger.info(f"SQLAlchemyCredentialStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """One unit of work: commit on exit, roll back and re-raise on error."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Credential store transaction rolled back: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create the credentials table when missing."""
        Base.metadata.create_all(self.engine)
        logger.info("Credential tables created/verified")

    def save(self, record: CredentialRecord) -> None:
        with self._session() as session:
            session.merge(
                CredentialDB(
                    owner_id=record.owner_id,
                    encrypted_payload=record.encrypted_payload,
                    is_valid=record.is_valid,
                    last_validated_at=record.last_validated_at,
                )
            )
            logger.info(f"Stored credential for owner {record.owner_id} (valid={record.is_valid})")

    def get(self, owner_id: str) -> Optional[CredentialRecord]:
        with self._session() as session:
            db_record = session.get(CredentialDB, owner_id)
            if not db_record:
                return None
            return db_record.to_record()

    def set_validation(self, owner_id: str, is_valid: bool, validated_at: datetime) -> bool:
        with self._session() as session:
            db_record = session.get(CredentialDB, owner_id)
            if not db_record:
                logger.warning(f"Cannot update validation for owner {owner_id}: not found")
                return False

            db_record.is_valid = is_valid
            db_record.last_validated_at = validated_at
            return True

    def delete(self, owner_id: str) -> bool:
        with self._session() as session:
            count = (
                session.query(CredentialDB).filter(CredentialDB.owner_id == owner_id).delete()
            )
            if count:
                logger.info(f"Deleted credential for owner {owner_id}")
            return count > 0
