"""
Embedding protocol consumed by the knowledge store.

The provider integration owns the embedding model; the knowledge store only
needs text in, fixed-length vector out.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Turns document and query text into comparable vectors.

    Implementations return vectors of length ``dimension`` for every input
    and raise on failure instead of returning an empty vector. The knowledge
    store converts any such failure into EmbeddingError.
    """

    @property
    def dimension(self) -> int:
        ...

    @property
    def model_name(self) -> str:
        """Shown in logs and knowledge-store stats."""
        ...

    async def embed_document(self, text: str) -> List[float]:
        """
        Embed document content before it is stored.

        Raises:
            ValueError: If text is empty
        """
        ...

    async def embed_query(self, text: str) -> List[float]:
        """Embed a search query into the same space as documents."""
        ...
