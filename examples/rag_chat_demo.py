"""
RAG Chat Demo

Stores an encrypted API key, seeds the default knowledge corpus and asks a
question through the full chat pipeline.

Requires OPENAI_API_KEY (used both as the service key for embeddings and as
the demo user's key).
"""

import asyncio
import logging
import os

from casual_llm import UserMessage
from dotenv import load_dotenv
from sqlalchemy import create_engine

from chat_orchestrator import ChatService, OrchestratorSettings
from chat_orchestrator.storage import SQLAlchemyCredentialStore

load_dotenv()
logging.basicConfig(level=logging.INFO)


async def main():
    print("=== RAG Chat Demo ===\n")

    api_key = os.environ["OPENAI_API_KEY"]
    settings = OrchestratorSettings(service_api_key=api_key)

    credential_store = SQLAlchemyCredentialStore(create_engine("sqlite:///demo_credentials.db"))
    credential_store.create_tables()

    service = ChatService.from_settings(settings, credential_store=credential_store)
    seeded = await service.initialize()
    print(f"Knowledge store seeded with {seeded} documents")

    upstream_health = await service.health_check()
    print(f"Upstream: {upstream_health.status} ({upstream_health.model})\n")

    stored = await service.manage_credential("demo-user", "store", {"api_key": api_key})
    print(f"Key stored: valid={stored['valid']}, models={len(stored['models_available'])}\n")

    result = await service.chat(
        "demo-user",
        [UserMessage(content="How should I design a custom MCP server?")],
    )

    if result.success:
        print(f"[{result.model}, attempt {result.attempt}]\n{result.response}\n")
        for source in result.sources:
            print(f"  source: {source.title} ({source.similarity * 100:.1f}%)")
        print()
    else:
        print(f"Chat failed: {result.error} ({result.details})\n")

    print("Streaming follow-up:")
    stream_result = await service.chat_stream(
        "demo-user",
        [UserMessage(content="Which orchestration pattern fits a small team?")],
    )
    if stream_result.success:
        async with stream_result.stream as stream:
            async for chunk in stream:
                print(chunk, end="", flush=True)
        print("\n")

    health = service.orchestrator.get_health_status()
    print(
        f"Health: healthy={health.is_healthy}, requests={health.total_requests}, "
        f"avg={health.average_response_time:.0f}ms"
    )


if __name__ == "__main__":
    asyncio.run(main())
