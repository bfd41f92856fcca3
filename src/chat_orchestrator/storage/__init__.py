"""
Storage protocols and backends for credentials, documents and conversations.

Implementations can use various databases as long as they satisfy the
protocol interface.
"""

from chat_orchestrator.storage.conversations.memory import InMemoryConversationStore
from chat_orchestrator.storage.credentials.memory import InMemoryCredentialStore
from chat_orchestrator.storage.credentials.sqlalchemy import SQLAlchemyCredentialStore
from chat_orchestrator.storage.documents.memory import InMemoryDocumentStore
from chat_orchestrator.storage.protocols import ConversationStore, CredentialStore, DocumentStore

__all__ = [
    "CredentialStore",
    "DocumentStore",
    "ConversationStore",
    "InMemoryCredentialStore",
    "SQLAlchemyCredentialStore",
    "InMemoryDocumentStore",
    "InMemoryConversationStore",
]
