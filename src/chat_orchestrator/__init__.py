"""
chat-orchestrator: Retrieval-augmented chat with encrypted credentials and resilient generation.

Core components:
- vault: AES-256-GCM credential encryption, validation and per-user storage
- knowledge: Document store with embedding similarity search
- prompting: Retrieval-augmented system prompt construction
- generation: Model fallback, retries, backoff and health telemetry
- upstream / embeddings: Provider protocols and OpenAI adapters
- storage: Protocol abstractions and backends for credentials, documents, conversations
"""

__version__ = "0.1.0"

from chat_orchestrator.models import (
    ChatResult,
    Document,
    DocumentFilter,
    DocumentInput,
    GenerationOptions,
    GenerationResult,
    HealthStatus,
    SearchResult,
)
from chat_orchestrator.chat_service import ChatService
from chat_orchestrator.config import OrchestratorSettings, get_settings

__all__ = [
    "__version__",
    # Models
    "ChatResult",
    "Document",
    "DocumentFilter",
    "DocumentInput",
    "GenerationOptions",
    "GenerationResult",
    "HealthStatus",
    "SearchResult",
    "ChatService",
    "OrchestratorSettings",
    "get_settings",
]
