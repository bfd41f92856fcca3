"""
Unit tests for SQLAlchemy credential storage.

Runs against in-memory SQLite.
"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from chat_orchestrator.models import CredentialRecord
from chat_orchestrator.storage.credentials.sqlalchemy import SQLAlchemyCredentialStore


@pytest.fixture
def credential_store():
    """Create a fresh SQLAlchemy credential store with in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = SQLAlchemyCredentialStore(engine)
    store.create_tables()
    return store


@pytest.fixture
def sample_record():
    return CredentialRecord(
        owner_id="user1",
        encrypted_payload="aa:bb:cc",
        is_valid=True,
        last_validated_at=datetime(2025, 1, 1, 12, 0, 0),
    )


def test_create_tables(credential_store):
    """Test that the schema exists and is empty."""
    assert credential_store.get("any_user") is None


def test_save_and_get(credential_store, sample_record):
    credential_store.save(sample_record)

    record = credential_store.get("user1")

    assert record is not None
    assert record.owner_id == "user1"
    assert record.encrypted_payload == "aa:bb:cc"
    assert record.is_valid is True
    assert record.last_validated_at == datetime(2025, 1, 1, 12, 0, 0)


def test_save_replaces_existing(credential_store, sample_record):
    """Test that saving for the same owner overwrites the record."""
    credential_store.save(sample_record)
    credential_store.save(
        CredentialRecord(owner_id="user1", encrypted_payload="dd:ee:ff", is_valid=False)
    )

    record = credential_store.get("user1")

    assert record.encrypted_payload == "dd:ee:ff"
    assert record.is_valid is False
    assert record.last_validated_at is None


def test_set_validation(credential_store, sample_record):
    credential_store.save(sample_record)
    validated_at = datetime(2025, 6, 1, 9, 30, 0)

    assert credential_store.set_validation("user1", False, validated_at) is True

    record = credential_store.get("user1")
    assert record.is_valid is False
    assert record.last_validated_at == validated_at


def test_set_validation_missing(credential_store):
    assert credential_store.set_validation("nobody", True, datetime.now()) is False


def test_delete(credential_store, sample_record):
    credential_store.save(sample_record)

    assert credential_store.delete("user1") is True
    assert credential_store.get("user1") is None
    assert credential_store.delete("user1") is False


def test_owners_are_isolated(credential_store, sample_record):
    credential_store.save(sample_record)
    credential_store.save(
        CredentialRecord(owner_id="user2", encrypted_payload="11:22:33", is_valid=False)
    )

    credential_store.delete("user2")

    assert credential_store.get("user1") is not None
    assert credential_store.get("user2") is None
