"""
Configuration for chat-orchestrator.

Settings are read from environment variables prefixed with
``CHAT_ORCHESTRATOR_`` (and from a ``.env`` file when present). List-valued
settings are given as JSON, e.g.
``CHAT_ORCHESTRATOR_FALLBACK_MODELS='["gpt-4o-mini"]'``.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrchestratorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHAT_ORCHESTRATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credential vault
    encryption_key: str = Field(
        default="change-me-in-production", description="Secret the AES key is derived from"
    )
    encryption_salt: str = Field(
        default="chat-orchestrator", description="PBKDF2 salt for key derivation"
    )
    kdf_iterations: int = Field(default=100_000, ge=1)

    # Generation
    primary_model: str = "gpt-4o-mini"
    fallback_models: List[str] = Field(default_factory=lambda: ["gpt-3.5-turbo"])
    max_tokens: int = Field(default=1000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_retries: int = Field(default=3, ge=1)
    retry_delays: List[float] = Field(default_factory=lambda: [1.0, 2.0, 4.0])
    request_timeout: float = Field(default=30.0, gt=0)
    health_check_timeout: float = Field(default=10.0, gt=0)
    non_retryable_codes: List[str] = Field(
        default_factory=lambda: ["invalid_api_key", "insufficient_quota"]
    )

    # Health telemetry
    unhealthy_threshold: int = Field(default=3, ge=1)
    error_log_size: int = Field(default=10, ge=1)

    # Retrieval
    prompt_documents: int = Field(default=3, ge=1)
    conversation_history_size: int = Field(default=20, ge=1)
    embedding_model: str = "text-embedding-3-small"
    seed_default_corpus: bool = Field(
        default=True, description="Load the built-in corpus into an empty store on initialize()"
    )

    # Upstream provider
    openai_base_url: Optional[str] = None
    service_api_key: Optional[str] = Field(
        default=None, description="Credential used for embeddings and health probes"
    )

    @property
    def model_chain(self) -> List[str]:
        """Primary model followed by the fallbacks, without duplicates."""
        chain = [self.primary_model]
        for model in self.fallback_models:
            if model not in chain:
                chain.append(model)
        return chain


@lru_cache(maxsize=1)
def get_settings() -> OrchestratorSettings:
    """Return the process-wide settings instance."""
    return OrchestratorSettings()
