"""Upstream AI provider protocol and adapters."""

from chat_orchestrator.upstream.openai_upstream import OpenAIUpstream, map_openai_error
from chat_orchestrator.upstream.protocol import UpstreamProvider

__all__ = [
    "UpstreamProvider",
    "OpenAIUpstream",
    "map_openai_error",
]
