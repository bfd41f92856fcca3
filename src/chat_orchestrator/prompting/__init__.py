"""Retrieval-augmented system prompt construction."""

from chat_orchestrator.prompting.builder import (
    RetrievalPromptBuilder,
    render_documents,
    render_history,
)

__all__ = [
    "RetrievalPromptBuilder",
    "render_documents",
    "render_history",
]
