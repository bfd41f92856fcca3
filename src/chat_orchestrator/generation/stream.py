"""
Streaming generation handles.
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional

from chat_orchestrator.exceptions import StreamInterruptedError
from chat_orchestrator.models import SearchResult

logger = logging.getLogger(__name__)


class TokenStream:
    """
    Live handle over an established upstream token stream.

    Iterating yields text deltas. A failure after the stream has started is
    raised to the consumer as StreamInterruptedError; the stream is never
    restarted. Completion callbacks receive the full text once the upstream
    iterator is exhausted.

    Consumers that may stop early should close the stream, either with
    ``aclose()`` or by using it as an async context manager:

        async with result.stream as stream:
            async for delta in stream:
                ...
    """

    def __init__(self, source: AsyncIterator[str], model: str):
        self._source = source
        self.model = model
        self._chunks: List[str] = []
        self._callbacks: List[Callable[[str], None]] = []
        self.finished = False

    @property
    def text(self) -> str:
        """Text received so far."""
        return "".join(self._chunks)

    def on_complete(self, callback: Callable[[str], None]) -> None:
        self._callbacks.append(callback)

    async def aclose(self) -> None:
        """Stop the stream and release the upstream source."""
        self.finished = True
        close = getattr(self._source, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "TokenStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __aiter__(self) -> "TokenStream":
        return self

    async def __anext__(self) -> str:
        if self.finished:
            raise StopAsyncIteration

        try:
            chunk = await self._source.__anext__()
        except StopAsyncIteration:
            self.finished = True
            text = self.text
            for callback in self._callbacks:
                callback(text)
            raise
        except StreamInterruptedError:
            await self.aclose()
            raise
        except Exception as e:
            await self.aclose()
            logger.error(f"Stream from {self.model} interrupted after {len(self._chunks)} chunks: {e}")
            raise StreamInterruptedError(
                f"Stream from {self.model} interrupted", details=str(e)
            ) from e

        self._chunks.append(chunk)
        return chunk


@dataclass
class StreamResult:
    """
    Result of opening a streaming generation.

    Attributes:
        success: Whether a stream was established
        stream: The live token stream (only on success)
        model: Model that accepted the request
        attempt: 1-based attempt number that succeeded
        error: Summary of the terminal failure
        details: Message of the last underlying error
        sources: Documents the prompt was grounded on
    """

    success: bool
    stream: Optional[TokenStream] = None
    model: Optional[str] = None
    attempt: Optional[int] = None
    error: Optional[str] = None
    details: Optional[str] = None
    sources: List[SearchResult] = field(default_factory=list)
