"""
Error taxonomy for chat-orchestrator.

Every error carries a stable ``error_code`` and optional ``details`` so the
chat service can turn it into a structured failure without leaking tracebacks:

- EncryptionError / DecryptionError: credential payload problems, never retried
- InvalidCredentialError / QuotaExceededError: non-retryable upstream rejections
- TransientUpstreamError: timeouts, 5xx and network failures (retryable)
- EmbeddingError: a vector could not be computed
- NotFoundError: referenced document or credential does not exist
"""

from typing import Optional


class OrchestratorError(Exception):
    """Base class for all chat-orchestrator errors."""

    error_code: str = "orchestrator_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to a structured error payload."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class EncryptionError(OrchestratorError):
    """Raised when a credential cannot be encrypted."""

    error_code = "encryption_error"


class DecryptionError(OrchestratorError):
    """Raised when a payload is malformed, tampered with, or keyed differently."""

    error_code = "decryption_error"


class UpstreamError(OrchestratorError):
    """Base class for failures reported by the upstream AI provider."""

    error_code = "upstream_error"

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.status_code = status_code


class InvalidCredentialError(UpstreamError):
    """The upstream provider rejected the credential."""

    error_code = "invalid_credential"


class QuotaExceededError(UpstreamError):
    """The credential has no remaining quota."""

    error_code = "quota_exceeded"


class TransientUpstreamError(UpstreamError):
    """Timeout, server error or network failure; safe to retry."""

    error_code = "transient_upstream_error"


class StreamInterruptedError(TransientUpstreamError):
    """A token stream failed after it had started producing output."""

    error_code = "stream_interrupted"


class EmbeddingError(OrchestratorError):
    """Raised when text cannot be embedded."""

    error_code = "embedding_error"


class NotFoundError(OrchestratorError):
    """Raised when a referenced document or credential does not exist."""

    error_code = "not_found"

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}", details=f"{kind}_id={identifier}")
        self.kind = kind
        self.identifier = identifier


class MissingCredentialError(OrchestratorError):
    """No usable credential exists for the requesting owner."""

    error_code = "missing_credential"

    def __init__(self, owner_id: str):
        super().__init__(
            "No valid API key found for user",
            details=f"owner_id={owner_id}",
        )
        self.owner_id = owner_id
