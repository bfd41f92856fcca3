"""
Upstream AI provider protocol.

The provider integration supplies chat completion (buffered and streaming)
and model listing. Implementations must raise the errors from
``chat_orchestrator.exceptions`` (InvalidCredentialError, QuotaExceededError,
TransientUpstreamError) so the orchestrator can classify failures without
knowing the provider's own error types.
"""

from typing import AsyncIterator, List, Protocol

from casual_llm import ChatMessage
from typing_extensions import runtime_checkable

from chat_orchestrator.models import Completion, CompletionParams


@runtime_checkable
class UpstreamProvider(Protocol):
    """Protocol for the upstream chat-completion provider."""

    async def complete(
        self, model: str, messages: List[ChatMessage], params: CompletionParams
    ) -> Completion:
        """
        Run a buffered chat completion.

        Args:
            model: Model identifier
            messages: Conversation, system prompt first
            params: Generation parameters and credential

        Returns:
            The completion text and token usage
        """
        ...

    async def stream(
        self, model: str, messages: List[ChatMessage], params: CompletionParams
    ) -> AsyncIterator[str]:
        """
        Open a streaming chat completion.

        Returns once the upstream has accepted the request; the iterator
        yields text deltas as they arrive.
        """
        ...

    async def list_models(self, credential: str) -> List[str]:
        """
        List model identifiers visible to a credential.

        Used as the lightweight liveness check for a credential.
        """
        ...
