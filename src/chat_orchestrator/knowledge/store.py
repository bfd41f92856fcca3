"""
Knowledge store: a small document corpus searchable by embedding similarity.

Every document's embedding is computed from its current content before the
document becomes visible to search. Failed embeddings never leave partial
writes behind.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from chat_orchestrator.embeddings import TextEmbedding
from chat_orchestrator.exceptions import EmbeddingError, NotFoundError
from chat_orchestrator.models import (
    Document,
    DocumentFilter,
    DocumentInput,
    DocumentSummary,
    DocumentUpdate,
    KnowledgeStats,
    OperationResult,
    SearchResult,
)
from chat_orchestrator.storage.documents.memory import InMemoryDocumentStore
from chat_orchestrator.storage.protocols import DocumentStore

logger = logging.getLogger(__name__)


class KnowledgeStore:
    def __init__(self, embedding: TextEmbedding, backend: Optional[DocumentStore] = None):
        self.embedding = embedding
        self.backend = backend if backend is not None else InMemoryDocumentStore()

        logger.info(f"KnowledgeStore initialized (embedding={embedding.model_name})")

    async def _embed_document(self, document_id: str, content: str) -> List[float]:
        try:
            return await self.embedding.embed_document(content)
        except Exception as e:
            logger.error(f"Failed to embed document {document_id}: {e}")
            raise EmbeddingError(f"Failed to embed document {document_id}", details=str(e)) from e

    async def add_document(self, doc: DocumentInput) -> Document:
        """
        Embed and store a document, replacing any document with the same id.

        Raises:
            EmbeddingError: If the embedding function fails; nothing is stored
        """
        vector = await self._embed_document(doc.id, doc.content)

        now = datetime.now()
        existing = self.backend.get(doc.id)
        document = Document(
            id=doc.id,
            title=doc.title,
            content=doc.content,
            tags=list(doc.tags),
            metadata=dict(doc.metadata),
            embedding=vector,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.backend.put(document)

        logger.info(f"Document added to knowledge store: {doc.id}")
        return document

    async def seed(self, documents: Iterable[DocumentInput]) -> int:
        """Add a batch of documents; returns how many were added."""
        count = 0
        for doc in documents:
            await self.add_document(doc)
            count += 1

        logger.info(f"Knowledge store initialization completed ({count} documents)")
        return count

    async def search(
        self,
        query_text: str,
        limit: int = 5,
        filters: Optional[DocumentFilter] = None,
    ) -> List[SearchResult]:
        """
        Rank documents by cosine similarity to the query.

        Documents outside ``filters`` (required tags, exact metadata values)
        are excluded before ranking, so ``limit`` counts matching documents.

        Raises:
            EmbeddingError: If the query cannot be embedded
        """
        if limit <= 0:
            return []

        try:
            query_vector = await self.embedding.embed_query(query_text)
        except Exception as e:
            logger.error(f"Failed to embed query: {e}")
            raise EmbeddingError("Failed to embed search query", details=str(e)) from e

        ranked = self.backend.search(query_vector, limit, filters)

        logger.info(f"Search completed, found {len(ranked)} results")

        return [
            SearchResult(
                id=document.id,
                title=document.title,
                content=document.content,
                tags=list(document.tags),
                metadata=dict(document.metadata),
                similarity=score,
            )
            for document, score in ranked
        ]

    def get_document(self, document_id: str) -> Optional[Document]:
        return self.backend.get(document_id)

    async def update_document(self, document_id: str, update: DocumentUpdate) -> Document:
        """
        Merge a partial update into a document.

        A content change is re-embedded before the update is committed.

        Raises:
            NotFoundError: If the document does not exist
            EmbeddingError: If re-embedding fails; the old document is kept
        """
        existing = self.backend.get(document_id)
        if existing is None:
            raise NotFoundError("document", document_id)

        changes = update.model_dump(exclude_none=True)
        if "content" in changes and changes["content"] != existing.content:
            changes["embedding"] = await self._embed_document(document_id, changes["content"])
        changes["updated_at"] = datetime.now()

        document = existing.model_copy(update=changes)
        self.backend.put(document)

        logger.info(f"Document updated: {document_id} (fields={sorted(changes)})")
        return document

    def delete_document(self, document_id: str) -> OperationResult:
        deleted = self.backend.delete(document_id)
        if deleted:
            logger.info(f"Document deleted from knowledge store: {document_id}")
        else:
            logger.warning(f"Cannot delete document {document_id}: not found")
        return OperationResult(success=deleted)

    def find_by_tag(self, tag: str) -> List[Document]:
        """Documents carrying ``tag``, in insertion order."""
        return [document for document in self.backend.all() if tag in document.tags]

    def stats(self) -> KnowledgeStats:
        documents = self.backend.all()
        return KnowledgeStats(
            total_documents=len(documents),
            document_summaries=[
                DocumentSummary(
                    id=document.id,
                    title=document.title,
                    tags=list(document.tags),
                    content_length=len(document.content),
                    updated_at=document.updated_at,
                )
                for document in documents
            ],
        )
