"""
Generation orchestrator.

Sends a chat request through an ordered model chain with bounded retries,
exponential backoff and health telemetry. The chain is walked attempt by
attempt: every model is tried once per attempt, and the orchestrator sleeps
between attempts (never after the last one). Attempts, backoff and the
retry decision run on tenacity. A non-retryable failure aborts the whole
chain immediately.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from casual_llm import ChatMessage, UserMessage
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
)

from chat_orchestrator.exceptions import OrchestratorError, TransientUpstreamError, UpstreamError
from chat_orchestrator.generation.classifier import ErrorClassifier
from chat_orchestrator.generation.health import HealthTracker
from chat_orchestrator.generation.stream import StreamResult, TokenStream
from chat_orchestrator.models import (
    CompletionParams,
    ConnectivityResult,
    GenerationOptions,
    GenerationResult,
    HealthCheckResult,
    HealthStatus,
)
from chat_orchestrator.upstream.protocol import UpstreamProvider

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAYS = (1.0, 2.0, 4.0)

TERMINAL_FAILURE_MESSAGE = "Failed to generate response after multiple attempts"

HEALTH_CHECK_PROMPT = "Health check"


@dataclass
class _ChainOutcome:
    """Internal result of walking the model chain once."""

    value: Any = None
    model: Optional[str] = None
    attempt: Optional[int] = None
    response_time: float = 0.0
    last_error: Optional[BaseException] = None
    calls: int = 0

    @property
    def success(self) -> bool:
        return self.model is not None


class GenerationOrchestrator:
    """
    Generate responses with model fallback, retries and health tracking.

    Example:
        >>> orchestrator = GenerationOrchestrator(upstream=OpenAIUpstream())
        >>> result = await orchestrator.generate(
        ...     messages,
        ...     GenerationOptions(model_chain=["gpt-4o-mini", "gpt-3.5-turbo"], api_key=key),
        ... )
        >>> if result.success:
        ...     print(result.response, result.model, result.attempt)
    """

    def __init__(
        self,
        upstream: UpstreamProvider,
        health: Optional[HealthTracker] = None,
        classifier: Optional[ErrorClassifier] = None,
        retry_delays: Sequence[float] = DEFAULT_RETRY_DELAYS,
        primary_model: str = "gpt-4o-mini",
        health_check_timeout: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            upstream: Provider used for completions, streams and model listing
            health: Shared health tracker (a fresh one if None)
            classifier: Retryability policy (default codes/types if None)
            retry_delays: Seconds to wait after each failed attempt; the last
                value is reused when there are more attempts than delays
            primary_model: Model probed by health_check and test_connectivity
            health_check_timeout: Timeout for the health probe in seconds
            sleep: Awaitable sleep (injectable so tests do not wait)
        """
        if not retry_delays:
            raise ValueError("retry_delays must contain at least one delay")

        self.upstream = upstream
        self.health = health or HealthTracker()
        self.classifier = classifier or ErrorClassifier()
        self.retry_delays = tuple(retry_delays)
        self.primary_model = primary_model
        self.health_check_timeout = health_check_timeout
        self._sleep = sleep
        self._wait = wait_chain(*[wait_fixed(delay) for delay in self.retry_delays])

        logger.info(
            f"GenerationOrchestrator initialized: primary_model={primary_model}, "
            f"retry_delays={list(self.retry_delays)}"
        )

    async def _walk_models(
        self,
        options: GenerationOptions,
        invoke: Callable[[str], Awaitable[Any]],
        attempt: int,
        outcome: _ChainOutcome,
    ) -> Tuple[str, Any]:
        """
        Try every model in the chain once.

        Returns the first (model, value) that succeeds. Raises the first
        non-retryable error as soon as it is seen, otherwise the last
        retryable error once the chain is exhausted.
        """
        last_error: Optional[BaseException] = None

        for model in options.model_chain:
            outcome.calls += 1
            try:
                value = await asyncio.wait_for(invoke(model), timeout=options.timeout)
            except asyncio.TimeoutError:
                last_error = TransientUpstreamError(
                    f"Request to {model} timed out after {options.timeout}s",
                    code="timeout",
                )
                logger.warning(f"Attempt {attempt} with {model} timed out")
            except Exception as e:
                if not self.classifier.is_retryable(e):
                    logger.error(f"Non-retryable error from {model}: {e}")
                    raise
                last_error = e
                logger.warning(f"Attempt {attempt} with {model} failed: {e}")
            else:
                return model, value

        raise last_error

    async def _run_chain(
        self,
        options: GenerationOptions,
        invoke: Callable[[str], Awaitable[Any]],
    ) -> _ChainOutcome:
        """
        Walk the model chain until one call succeeds.

        Each tenacity attempt walks the whole chain; the backoff between
        attempts comes from retry_delays. Non-retryable errors propagate to
        the caller without touching the health tracker, as an UpstreamError
        when the provider raised something outside the error taxonomy. A
        terminal failure (all attempts exhausted) records one health
        failure; a success records one health success.
        """
        start = time.perf_counter()
        outcome = _ChainOutcome()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(options.max_retries),
            wait=self._wait,
            retry=retry_if_exception(self.classifier.is_retryable),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

        try:
            async for attempt in retrying:
                with attempt:
                    number = attempt.retry_state.attempt_number
                    outcome.model, outcome.value = await self._walk_models(
                        options, invoke, number, outcome
                    )
                    outcome.attempt = number
        except RetryError as e:
            outcome.last_error = e.last_attempt.exception()
            outcome.response_time = (time.perf_counter() - start) * 1000
            self.health.record_failure(str(outcome.last_error))
            logger.error(
                f"All {outcome.calls} generation calls failed; last error: {outcome.last_error}"
            )
            return outcome
        except OrchestratorError:
            raise
        except Exception as e:
            raise UpstreamError(
                str(e), details=type(e).__name__, code=getattr(e, "code", None)
            ) from e

        outcome.response_time = (time.perf_counter() - start) * 1000
        self.health.record_success(outcome.response_time)
        logger.info(
            f"Generation succeeded with {outcome.model} on attempt {outcome.attempt} "
            f"({outcome.response_time:.0f}ms)"
        )
        return outcome

    @staticmethod
    def _params(options: GenerationOptions) -> CompletionParams:
        return CompletionParams(
            max_tokens=options.max_tokens,
            temperature=options.temperature,
            api_key=options.api_key,
        )

    async def generate(
        self, messages: List[ChatMessage], options: GenerationOptions
    ) -> GenerationResult:
        """
        Generate a buffered response.

        Args:
            messages: Conversation to send, system prompt first
            options: Model chain, retry budget, sampling parameters and credential

        Returns:
            GenerationResult with the response, the model that answered and
            the 1-based attempt number, or success=False when every call failed

        Raises:
            InvalidCredentialError / QuotaExceededError: On non-retryable
                upstream rejections (no further calls are made)
        """
        params = self._params(options)
        outcome = await self._run_chain(
            options, lambda model: self.upstream.complete(model, messages, params)
        )

        if not outcome.success:
            return GenerationResult(
                success=False,
                error=TERMINAL_FAILURE_MESSAGE,
                details=str(outcome.last_error),
                attempts=options.max_retries,
                response_time=outcome.response_time,
            )

        return GenerationResult(
            success=True,
            response=outcome.value.content,
            model=outcome.model,
            attempt=outcome.attempt,
            usage=outcome.value.usage,
            response_time=outcome.response_time,
        )

    async def generate_stream(
        self, messages: List[ChatMessage], options: GenerationOptions
    ) -> StreamResult:
        """
        Open a streaming response.

        Fallback and retries apply only until a stream is established. Once
        tokens flow, a failure surfaces from the TokenStream as
        StreamInterruptedError and is not retried.
        """
        params = self._params(options)
        outcome = await self._run_chain(
            options, lambda model: self.upstream.stream(model, messages, params)
        )

        if not outcome.success:
            return StreamResult(
                success=False,
                error=TERMINAL_FAILURE_MESSAGE,
                details=str(outcome.last_error),
            )

        return StreamResult(
            success=True,
            stream=TokenStream(outcome.value, outcome.model),
            model=outcome.model,
            attempt=outcome.attempt,
        )

    async def health_check(self, credential: Optional[str] = None) -> HealthCheckResult:
        """
        Probe the primary model with a tiny completion.

        Updates the health tracker with the outcome and never raises.
        """
        params = CompletionParams(max_tokens=10, api_key=credential)
        messages = [UserMessage(content=HEALTH_CHECK_PROMPT)]
        start = time.perf_counter()

        try:
            await asyncio.wait_for(
                self.upstream.complete(self.primary_model, messages, params),
                timeout=self.health_check_timeout,
            )
        except asyncio.TimeoutError:
            error = f"Health check timed out after {self.health_check_timeout}s"
            self.health.record_failure(error)
            logger.warning(error)
            return HealthCheckResult(status="unhealthy", model=self.primary_model, error=error)
        except Exception as e:
            self.health.record_failure(str(e))
            logger.warning(f"Health check failed: {e}")
            return HealthCheckResult(status="unhealthy", model=self.primary_model, error=str(e))

        response_time = (time.perf_counter() - start) * 1000
        self.health.record_success(response_time)
        return HealthCheckResult(
            status="healthy", model=self.primary_model, response_time=response_time
        )

    async def test_connectivity(self, credential: str) -> ConnectivityResult:
        """Check that the credential can list models and whether the primary model is among them."""
        try:
            models = await self.upstream.list_models(credential)
        except Exception as e:
            logger.warning(f"Connectivity test failed: {e}")
            return ConnectivityResult(success=False, error=str(e))

        return ConnectivityResult(
            success=True,
            models_available=len(models),
            primary_model_available=self.primary_model in models,
        )

    def get_health_status(self) -> HealthStatus:
        return self.health.snapshot()
