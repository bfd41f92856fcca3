"""
Custom Upstream Provider Example

Shows how to plug any chat backend into the orchestrator by implementing the
UpstreamProvider protocol. The flaky provider below fails its first calls so
the model fallback, retry and health tracking can be watched offline.
"""

import asyncio
from typing import AsyncIterator, List

from casual_llm import ChatMessage, UserMessage

from chat_orchestrator.exceptions import TransientUpstreamError
from chat_orchestrator.generation import GenerationOrchestrator, HealthTracker
from chat_orchestrator.models import Completion, CompletionParams, GenerationOptions
from chat_orchestrator.upstream import UpstreamProvider


class FlakyProvider:
    """Fails the first ``failures`` calls, then echoes the last message."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls: List[str] = []

    async def complete(
        self, model: str, messages: List[ChatMessage], params: CompletionParams
    ) -> Completion:
        self.calls.append(model)
        if len(self.calls) <= self.failures:
            raise TransientUpstreamError(f"{model} overloaded", status_code=503)
        return Completion(content=f"[{model}] you said: {messages[-1].content}")

    async def stream(
        self, model: str, messages: List[ChatMessage], params: CompletionParams
    ) -> AsyncIterator[str]:
        completion = await self.complete(model, messages, params)

        async def words():
            for word in completion.content.split():
                yield word + " "

        return words()

    async def list_models(self, credential: str) -> List[str]:
        return ["primary", "fallback"]


async def main():
    print("=== Custom Upstream Provider ===\n")

    provider = FlakyProvider(failures=3)
    assert isinstance(provider, UpstreamProvider)

    orchestrator = GenerationOrchestrator(
        upstream=provider,
        health=HealthTracker(),
        retry_delays=[0.1, 0.2],
        primary_model="primary",
    )

    result = await orchestrator.generate(
        [UserMessage(content="hello")],
        GenerationOptions(model_chain=["primary", "fallback"], max_retries=3),
    )

    print(f"Calls made: {provider.calls}")
    print(f"Answered by {result.model} on attempt {result.attempt}: {result.response}")

    status = orchestrator.get_health_status()
    print(f"Health: {status.successful_requests}/{status.total_requests} successful")


if __name__ == "__main__":
    asyncio.run(main())
