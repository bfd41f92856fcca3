"""In-memory knowledge store with embedding similarity search."""

from chat_orchestrator.knowledge.corpus import DEFAULT_CORPUS
from chat_orchestrator.knowledge.store import KnowledgeStore

__all__ = [
    "KnowledgeStore",
    "DEFAULT_CORPUS",
]
