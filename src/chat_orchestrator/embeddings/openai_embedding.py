"""OpenAI embeddings for the knowledge store."""

import logging
import os
from typing import Dict, List, Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

KNOWN_MODEL_DIMENSIONS: Dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding:
    """
    TextEmbedding backed by the OpenAI embeddings endpoint.

    Documents and queries share one vector space, so both methods issue the
    same request. Any OpenAI-compatible endpoint works through ``base_url``;
    models outside KNOWN_MODEL_DIMENSIONS need an explicit ``dimensions``.

    Example:
        >>> embedder = OpenAIEmbedding(api_key=settings.service_api_key)
        >>> await knowledge_store.seed(DEFAULT_CORPUS)
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        """
        Args:
            model: Embedding model identifier
            api_key: Service credential; falls back to OPENAI_API_KEY
            base_url: Alternative OpenAI-compatible endpoint
            dimensions: Requested vector length (text-embedding-3-* only)
            timeout: Per-request timeout in seconds
            max_retries: SDK retries for transient failures
        """
        if dimensions is None and model not in KNOWN_MODEL_DIMENSIONS:
            raise ValueError(f"Unknown embedding model {model}; pass dimensions explicitly")

        self._model = model
        self._requested_dimensions = dimensions
        self._dimension = dimensions or KNOWN_MODEL_DIMENSIONS[model]
        self._client = AsyncOpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        logger.info(f"OpenAIEmbedding ready: model={model}, dimension={self._dimension}")

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    async def _embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        request = {"model": self._model, "input": text}
        if self._requested_dimensions is not None:
            request["dimensions"] = self._requested_dimensions

        response = await self._client.embeddings.create(**request)
        vector = response.data[0].embedding

        logger.debug(f"Embedded {len(text)} characters with {self._model}")
        return vector

    async def embed_document(self, text: str) -> List[float]:
        return await self._embed(text)

    async def embed_query(self, text: str) -> List[float]:
        return await self._embed(text)
