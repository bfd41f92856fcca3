"""Adapter that turns a plain embedding function into a TextEmbedding."""

import inspect
import logging
from typing import Awaitable, Callable, List, Union

logger = logging.getLogger(__name__)

EmbedFunction = Callable[[str], Union[List[float], Awaitable[List[float]]]]


class FunctionEmbedding:
    """
    Wraps an ``(text) -> vector`` callable supplied by the provider integration.

    The callable may be synchronous or a coroutine function. Documents and
    queries are embedded identically.

    Example:
        >>> embedder = FunctionEmbedding(my_embed, dimension=3, model_name="toy")
        >>> await embedder.embed_query("MCP protocol")
        [0.0, 1.0, 0.0]
    """

    def __init__(self, func: EmbedFunction, dimension: int, model_name: str = "custom"):
        self._func = func
        self._dimension = dimension
        self._model_name = model_name

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        result = self._func(text)
        if inspect.isawaitable(result):
            result = await result

        vector = [float(value) for value in result]
        if len(vector) != self._dimension:
            raise ValueError(
                f"Embedding function returned {len(vector)} values, expected {self._dimension}"
            )
        return vector

    async def embed_document(self, text: str) -> List[float]:
        return await self._embed(text)

    async def embed_query(self, text: str) -> List[float]:
        return await self._embed(text)
