"""OpenAI adapter implementing the UpstreamProvider protocol."""

import logging
import os
from typing import AsyncIterator, Dict, List, Optional

import openai
from casual_llm import ChatMessage
from openai import AsyncOpenAI

from chat_orchestrator.exceptions import (
    InvalidCredentialError,
    QuotaExceededError,
    TransientUpstreamError,
    UpstreamError,
)
from chat_orchestrator.models import Completion, CompletionParams

logger = logging.getLogger(__name__)


def map_openai_error(error: Exception) -> Exception:
    """
    Translate an OpenAI SDK exception into the orchestrator's error taxonomy.

    Exceptions that are not OpenAI errors are returned unchanged.
    """
    if not isinstance(error, openai.OpenAIError):
        return error

    code = getattr(error, "code", None)
    status_code = getattr(error, "status_code", None)
    message = str(error)

    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return InvalidCredentialError(message, code=code or "invalid_api_key", status_code=status_code)
    if isinstance(error, openai.RateLimitError):
        if code == "insufficient_quota":
            return QuotaExceededError(message, code=code, status_code=status_code)
        return TransientUpstreamError(message, code=code, status_code=status_code)
    if isinstance(error, (openai.APITimeoutError, openai.APIConnectionError)):
        return TransientUpstreamError(message, code=code or "connection_error")
    if isinstance(error, openai.APIStatusError) and error.status_code >= 500:
        return TransientUpstreamError(message, code=code, status_code=status_code)

    return UpstreamError(message, code=code, status_code=status_code)


def to_openai_messages(messages: List[ChatMessage]) -> List[dict]:
    """Convert casual-llm messages into OpenAI chat-completion dicts."""
    return [{"role": message.role, "content": message.content or ""} for message in messages]


class OpenAIUpstream:
    """
    Upstream provider backed by the OpenAI chat-completions API.

    One SDK client is kept per credential. SDK-level retries are disabled;
    retry and fallback are the orchestrator's job.

    Example:
        >>> upstream = OpenAIUpstream()
        >>> completion = await upstream.complete(
        ...     "gpt-4o-mini",
        ...     [UserMessage(content="Hello")],
        ...     CompletionParams(api_key="sk-..."),
        ... )
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30.0):
        self._base_url = base_url
        self._timeout = timeout
        self._clients: Dict[str, AsyncOpenAI] = {}

    def _client(self, api_key: Optional[str]) -> AsyncOpenAI:
        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise InvalidCredentialError("No API key supplied", code="invalid_api_key")

        if key not in self._clients:
            self._clients[key] = AsyncOpenAI(
                api_key=key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._clients[key]

    async def complete(
        self, model: str, messages: List[ChatMessage], params: CompletionParams
    ) -> Completion:
        client = self._client(params.api_key)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=to_openai_messages(messages),
                max_tokens=params.max_tokens,
                temperature=params.temperature,
            )
        except openai.OpenAIError as e:
            raise map_openai_error(e) from e

        usage = response.usage.model_dump() if response.usage else None
        return Completion(content=response.choices[0].message.content or "", usage=usage)

    async def stream(
        self, model: str, messages: List[ChatMessage], params: CompletionParams
    ) -> AsyncIterator[str]:
        client = self._client(params.api_key)
        try:
            stream = await client.chat.completions.create(
                model=model,
                messages=to_openai_messages(messages),
                max_tokens=params.max_tokens,
                temperature=params.temperature,
                stream=True,
            )
        except openai.OpenAIError as e:
            raise map_openai_error(e) from e

        return self._deltas(stream)

    async def _deltas(self, stream) -> AsyncIterator[str]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except openai.OpenAIError as e:
            raise map_openai_error(e) from e
        finally:
            await stream.close()

    async def list_models(self, credential: str) -> List[str]:
        client = self._client(credential)
        try:
            page = await client.models.list()
        except openai.OpenAIError as e:
            raise map_openai_error(e) from e

        return [model.id for model in page.data]

    async def aclose(self):
        """Close every cached SDK client."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
