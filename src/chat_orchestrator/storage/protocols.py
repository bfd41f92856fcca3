"""
Storage protocol definitions for credentials, documents and conversations.

These protocols define the interface that storage implementations must provide.
They are implementation-agnostic and can be backed by various databases
(PostgreSQL, SQLite, in-memory, a vector index, etc.).
"""

from datetime import datetime
from typing import List, Optional, Protocol, Tuple

from chat_orchestrator.models import ConversationTurn, CredentialRecord, Document, DocumentFilter


class CredentialStore(Protocol):
    """
    Protocol for encrypted credential storage.

    Holds at most one record per owner. Writes are last-write-wins.
    """

    def save(self, record: CredentialRecord) -> None:
        """
        Insert or overwrite the record for ``record.owner_id``.

        Args:
            record: The credential record to persist
        """
        ...

    def get(self, owner_id: str) -> Optional[CredentialRecord]:
        """
        Retrieve the record for an owner.

        Args:
            owner_id: The owner identifier

        Returns:
            The record if found, None otherwise
        """
        ...

    def set_validation(self, owner_id: str, is_valid: bool, validated_at: datetime) -> bool:
        """
        Update the validation flag and timestamp of an existing record.

        Args:
            owner_id: The owner identifier
            is_valid: Result of the validation
            validated_at: When the validation ran

        Returns:
            True if a record was updated, False if none exists
        """
        ...

    def delete(self, owner_id: str) -> bool:
        """
        Remove the record for an owner.

        Args:
            owner_id: The owner identifier

        Returns:
            True if a record was deleted, False if none existed
        """
        ...


class DocumentStore(Protocol):
    """
    Protocol for knowledge-store document storage.

    Documents keep their first insertion position; replacing a document with
    the same id does not move it. Similarity search is the backend's concern
    so an indexed implementation can replace the linear scan.
    """

    def put(self, document: Document) -> None:
        """Insert or replace a document keyed by ``document.id``."""
        ...

    def get(self, document_id: str) -> Optional[Document]:
        """Return the document, or None if absent."""
        ...

    def delete(self, document_id: str) -> bool:
        """Remove a document. Returns False if it did not exist."""
        ...

    def all(self) -> List[Document]:
        """Return all documents in insertion order."""
        ...

    def search(
        self,
        query_embedding: List[float],
        limit: int,
        filters: Optional[DocumentFilter] = None,
    ) -> List[Tuple[Document, float]]:
        """
        Rank documents by cosine similarity to a query vector.

        Args:
            query_embedding: The query embedding vector
            limit: Maximum number of results to return
            filters: Tag and metadata restrictions applied before ranking

        Returns:
            (document, similarity) pairs, highest similarity first, ties in
            insertion order
        """
        ...

    def count(self) -> int:
        """Number of stored documents."""
        ...


class ConversationStore(Protocol):
    """
    Protocol for short-term conversation storage.

    Stores the last N turns per owner for conversational context.
    """

    def add_turns(self, owner_id: str, turns: List[ConversationTurn]) -> int:
        """Append turns; returns the number added."""
        ...

    def get_recent_turns(self, owner_id: str, limit: int = 20) -> List[ConversationTurn]:
        """Recent turns, oldest first."""
        ...

    def clear(self, owner_id: str) -> int:
        """Drop all turns for an owner; returns the number removed."""
        ...
