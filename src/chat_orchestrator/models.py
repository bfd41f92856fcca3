import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Credential vault
# ---------------------------------------------------------------------------


class CredentialRecord(BaseModel):
    """Encrypted third-party credential owned by a single user."""

    owner_id: str = Field(..., description="Opaque identifier of the owning user")
    encrypted_payload: str = Field(..., description="'<iv>:<auth tag>:<ciphertext>' in hex")
    is_valid: bool = Field(default=False, description="Result of the last upstream validation")
    last_validated_at: Optional[datetime] = Field(
        default=None, description="When the credential was last validated"
    )


class ValidationResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    valid: bool
    models_available: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class StoreResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    success: bool
    valid: bool
    models_available: List[str] = Field(default_factory=list)


class CredentialStatus(BaseModel):
    has_key: bool
    valid: bool
    last_validated_at: Optional[datetime] = None


class OperationResult(BaseModel):
    success: bool


# ---------------------------------------------------------------------------
# Knowledge store
# ---------------------------------------------------------------------------


class DocumentInput(BaseModel):
    """A document submitted for indexing; the embedding is computed on add."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Document(BaseModel):
    id: str
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    embedding: List[float]
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class DocumentUpdate(BaseModel):
    """Partial update; unset fields are left untouched."""

    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None


class DocumentFilter(BaseModel):
    """
    Restricts a search before ranking.

    A document matches when it carries every listed tag and every metadata
    key with an equal value. Unset fields do not restrict.
    """

    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None


class SearchResult(BaseModel):
    id: str
    title: str
    content: str
    tags: List[str]
    metadata: Dict[str, Any] = Field(default_factory=dict)
    similarity: float


class RetrievalPrompt(BaseModel):
    """A built system prompt and the documents it was grounded on."""

    prompt: str
    sources: List[SearchResult] = Field(default_factory=list)


class DocumentSummary(BaseModel):
    id: str
    title: str
    tags: List[str]
    content_length: int
    updated_at: datetime


class KnowledgeStats(BaseModel):
    total_documents: int
    document_summaries: List[DocumentSummary]


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class CompletionParams(BaseModel):
    """Parameters forwarded to the upstream chat-completion call."""

    max_tokens: int = 1000
    temperature: float = 0.7
    api_key: Optional[str] = None


class Completion(BaseModel):
    content: str
    usage: Optional[Dict[str, Any]] = None


class GenerationOptions(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_chain: List[str] = Field(..., min_length=1, description="Primary model first")
    max_tokens: int = Field(default=1000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_retries: int = Field(default=3, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    api_key: Optional[str] = None


class GenerationResult(BaseModel):
    success: bool
    response: Optional[str] = None
    model: Optional[str] = None
    attempt: Optional[int] = None
    usage: Optional[Dict[str, Any]] = None
    response_time: Optional[float] = Field(default=None, description="Milliseconds")
    error: Optional[str] = None
    details: Optional[str] = None
    attempts: Optional[int] = None


class ErrorLogEntry(BaseModel):
    timestamp: datetime
    error: str
    consecutive_failures: int


class HealthStatus(BaseModel):
    total_requests: int = 0
    successful_requests: int = 0
    consecutive_failures: int = 0
    average_response_time: float = 0.0
    error_log: List[ErrorLogEntry] = Field(default_factory=list)
    is_healthy: bool = True
    last_check: Optional[datetime] = None
    success_rate: float = 0.0


class HealthCheckResult(BaseModel):
    status: Literal["healthy", "unhealthy"]
    model: str
    response_time: Optional[float] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class ConnectivityResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    success: bool
    models_available: int = 0
    primary_model_available: bool = False
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Chat service
# ---------------------------------------------------------------------------


class ChatResult(BaseModel):
    success: bool
    response: Optional[str] = None
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None
    attempt: Optional[int] = None
    sources: List[SearchResult] = Field(default_factory=list, description="Documents the prompt cited")
    error: Optional[str] = None
    details: Optional[str] = None


class ConversationTurn(BaseModel):
    """A cached conversation message."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: str
