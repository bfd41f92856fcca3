"""
Retrieval-augmented prompt builder.

Assembles the system prompt from the most relevant knowledge-store documents
and the conversation so far. Output depends only on the inputs and the
current store contents.
"""

import logging
from typing import List, Sequence

from casual_llm import ChatMessage

from chat_orchestrator.knowledge.store import KnowledgeStore
from chat_orchestrator.models import RetrievalPrompt, SearchResult
from chat_orchestrator.prompting.prompts import (
    DOCUMENT_TEMPLATE,
    NO_DOCUMENTS,
    NO_HISTORY,
    SYSTEM_PREAMBLE,
    SYSTEM_PROMPT_TEMPLATE,
)

logger = logging.getLogger(__name__)


def render_documents(results: Sequence[SearchResult]) -> str:
    return "\n\n".join(
        DOCUMENT_TEMPLATE.format(
            title=result.title,
            content=result.content,
            relevance=result.similarity * 100,
        )
        for result in results
    )


def render_history(conversation_history: Sequence[ChatMessage]) -> str:
    return "\n".join(
        f"{message.role}: {message.content or ''}" for message in conversation_history
    )


class RetrievalPromptBuilder:
    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        max_documents: int = 3,
        preamble: str = SYSTEM_PREAMBLE,
    ):
        self.knowledge_store = knowledge_store
        self.max_documents = max_documents
        self.preamble = preamble

    async def build(self, query: str, conversation_history: List[ChatMessage]) -> RetrievalPrompt:
        """
        Build the system prompt for a query, keeping the retrieved documents.

        Args:
            query: The user's current question
            conversation_history: Earlier messages, oldest first

        Returns:
            RetrievalPrompt whose ``prompt`` is the preamble, rendered
            documents, rendered history and the query as one string, and
            whose ``sources`` are the documents rendered into it

        Raises:
            EmbeddingError: If the query cannot be embedded
        """
        results = await self.knowledge_store.search(query, self.max_documents)

        logger.debug(
            f"Building prompt with {len(results)} documents and "
            f"{len(conversation_history)} history messages"
        )

        prompt = SYSTEM_PROMPT_TEMPLATE.format(
            preamble=self.preamble,
            documents=render_documents(results) or NO_DOCUMENTS,
            history=render_history(conversation_history) or NO_HISTORY,
            query=query,
        )
        return RetrievalPrompt(prompt=prompt, sources=results)

    async def build_prompt(self, query: str, conversation_history: List[ChatMessage]) -> str:
        """Build the system prompt for a query."""
        retrieval = await self.build(query, conversation_history)
        return retrieval.prompt
