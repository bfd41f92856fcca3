"""
Text embedding abstractions for chat-orchestrator.

Provides protocol-based embedding interfaces with adapters:
- FunctionEmbedding: wraps an injected ``(text) -> vector`` callable
- OpenAIEmbedding: OpenAI API embeddings
"""

from chat_orchestrator.embeddings.function_embedding import FunctionEmbedding
from chat_orchestrator.embeddings.openai_embedding import OpenAIEmbedding
from chat_orchestrator.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
    "FunctionEmbedding",
    "OpenAIEmbedding",
]
