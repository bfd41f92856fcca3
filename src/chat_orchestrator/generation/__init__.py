"""Model fallback, retries and health tracking for chat generation."""

from chat_orchestrator.generation.classifier import ErrorClassifier
from chat_orchestrator.generation.health import HealthTracker
from chat_orchestrator.generation.orchestrator import GenerationOrchestrator
from chat_orchestrator.generation.stream import StreamResult, TokenStream

__all__ = [
    "ErrorClassifier",
    "GenerationOrchestrator",
    "HealthTracker",
    "StreamResult",
    "TokenStream",
]
