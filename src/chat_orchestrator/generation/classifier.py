"""Retryability classification for upstream failures."""

import logging
from typing import Iterable, Tuple, Type

from chat_orchestrator.exceptions import (
    DecryptionError,
    EncryptionError,
    InvalidCredentialError,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

DEFAULT_NON_RETRYABLE_CODES = ("invalid_api_key", "insufficient_quota")

DEFAULT_NON_RETRYABLE_TYPES: Tuple[Type[BaseException], ...] = (
    InvalidCredentialError,
    QuotaExceededError,
    EncryptionError,
    DecryptionError,
)


class ErrorClassifier:
    """
    Decides whether a failed generation call may be retried.

    An error is non-retryable when it is an instance of one of the
    configured types, or when its ``code`` attribute is one of the configured
    codes. Everything else (timeouts, server errors, unknown failures) is
    retryable and moves the orchestrator on to the next model.
    """

    def __init__(
        self,
        non_retryable_codes: Iterable[str] = DEFAULT_NON_RETRYABLE_CODES,
        non_retryable_types: Tuple[Type[BaseException], ...] = DEFAULT_NON_RETRYABLE_TYPES,
    ):
        self.non_retryable_codes = frozenset(non_retryable_codes)
        self.non_retryable_types = non_retryable_types

    def is_retryable(self, error: BaseException) -> bool:
        if isinstance(error, self.non_retryable_types):
            return False

        code = getattr(error, "code", None)
        if code is not None and code in self.non_retryable_codes:
            return False

        return True
