"""
In-memory document storage implementation.

Documents live in an insertion-ordered dict and are ranked with a linear
cosine-similarity scan. Adequate for a corpus of a few dozen documents; an
indexed backend can implement the same DocumentStore protocol.
"""

import logging
from typing import Dict, List, Optional, Tuple

from chat_orchestrator.models import Document, DocumentFilter

logger = logging.getLogger(__name__)


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(vec1) != len(vec2):
        raise ValueError("Vectors must have the same length")

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = sum(a * a for a in vec1) ** 0.5
    magnitude2 = sum(b * b for b in vec2) ** 0.5

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


class InMemoryDocumentStore:
    """In-memory implementation of the DocumentStore protocol."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}

        logger.info("InMemoryDocumentStore initialized")

    def put(self, document: Document) -> None:
        # Re-assigning an existing key keeps its original position.
        self._documents[document.id] = document
        logger.debug(f"Stored document {document.id}: '{document.title[:50]}'")

    def get(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    def delete(self, document_id: str) -> bool:
        if document_id not in self._documents:
            return False

        del self._documents[document_id]
        return True

    def all(self) -> List[Document]:
        return list(self._documents.values())

    def count(self) -> int:
        return len(self._documents)

    @staticmethod
    def _matches_filters(document: Document, filters: Optional[DocumentFilter]) -> bool:
        if filters is None:
            return True

        if filters.tags and not all(tag in document.tags for tag in filters.tags):
            return False

        for key, value in (filters.metadata or {}).items():
            if document.metadata.get(key) != value:
                return False

        return True

    def search(
        self,
        query_embedding: List[float],
        limit: int,
        filters: Optional[DocumentFilter] = None,
    ) -> List[Tuple[Document, float]]:
        results = [
            (document, cosine_similarity(query_embedding, document.embedding))
            for document in self._documents.values()
            if self._matches_filters(document, filters)
        ]

        # sort() is stable, so equal scores stay in insertion order
        results.sort(key=lambda x: x[1], reverse=True)
        results = results[:limit]

        logger.debug(f"{len(results)} documents ranked (limit={limit})")

        return results

    def clear(self):
        """Remove every document."""
        count = len(self._documents)
        self._documents.clear()
        logger.info(f"Cleared all documents ({count} total)")
