from chat_orchestrator.config import OrchestratorSettings
from chat_orchestrator.embeddings import OpenAIEmbedding, TextEmbedding
from chat_orchestrator.exceptions import MissingCredentialError, OrchestratorError
from chat_orchestrator.generation import (
    ErrorClassifier,
    GenerationOrchestrator,
    HealthTracker,
    StreamResult,
)
from chat_orchestrator.knowledge import DEFAULT_CORPUS, KnowledgeStore
from chat_orchestrator.models import (
    ChatResult,
    ConversationTurn,
    GenerationOptions,
    HealthCheckResult,
    SearchResult,
)
from chat_orchestrator.prompting import RetrievalPromptBuilder
from chat_orchestrator.storage import (
    ConversationStore,
    CredentialStore,
    InMemoryConversationStore,
    InMemoryCredentialStore,
)
from chat_orchestrator.upstream import OpenAIUpstream, UpstreamProvider
from chat_orchestrator.vault import CredentialCipher, CredentialVault
from casual_llm import AssistantMessage, ChatMessage, SystemMessage, UserMessage
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

CREDENTIAL_ACTIONS = ("store", "revalidate", "remove", "status")


class ChatService:
    def __init__(
        self,
        vault: CredentialVault,
        prompt_builder: RetrievalPromptBuilder,
        orchestrator: GenerationOrchestrator,
        conversations: ConversationStore,
        settings: OrchestratorSettings,
    ):
        self.vault = vault
        self.prompt_builder = prompt_builder
        self.orchestrator = orchestrator
        self.conversations = conversations
        self.settings = settings


    @classmethod
    def from_settings(
        cls,
        settings: OrchestratorSettings,
        upstream: Optional[UpstreamProvider] = None,
        embedding: Optional[TextEmbedding] = None,
        credential_store: Optional[CredentialStore] = None,
        conversations: Optional[ConversationStore] = None,
    ) -> "ChatService":
        """
        Wire up a service from settings.

        Collaborators that are not given default to the OpenAI adapters and
        in-memory stores. The knowledge store starts empty until
        initialize() is awaited.
        """
        upstream = upstream or OpenAIUpstream(
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout,
        )
        embedding = embedding or OpenAIEmbedding(
            model=settings.embedding_model,
            api_key=settings.service_api_key,
            base_url=settings.openai_base_url,
        )

        cipher = CredentialCipher.from_secret(
            settings.encryption_key,
            settings.encryption_salt,
            settings.kdf_iterations,
        )
        vault = CredentialVault(cipher, credential_store or InMemoryCredentialStore(), upstream)

        prompt_builder = RetrievalPromptBuilder(
            KnowledgeStore(embedding),
            max_documents=settings.prompt_documents,
        )

        orchestrator = GenerationOrchestrator(
            upstream=upstream,
            health=HealthTracker(
                unhealthy_threshold=settings.unhealthy_threshold,
                error_log_size=settings.error_log_size,
            ),
            classifier=ErrorClassifier(non_retryable_codes=settings.non_retryable_codes),
            retry_delays=settings.retry_delays,
            primary_model=settings.primary_model,
            health_check_timeout=settings.health_check_timeout,
        )

        return cls(
            vault=vault,
            prompt_builder=prompt_builder,
            orchestrator=orchestrator,
            conversations=conversations
            or InMemoryConversationStore(max_turns=settings.conversation_history_size),
            settings=settings,
        )


    async def initialize(self) -> int:
        """
        Load the default corpus into an empty knowledge store.

        Returns the number of documents added; 0 when seeding is disabled or
        the store already holds documents.
        """
        knowledge_store = self.prompt_builder.knowledge_store
        if not self.settings.seed_default_corpus or knowledge_store.backend.count() > 0:
            return 0

        count = await knowledge_store.seed(DEFAULT_CORPUS)
        logger.info(f"ChatService initialized with {count} corpus documents")
        return count


    async def health_check(self) -> HealthCheckResult:
        """Probe the primary model with the service credential."""
        return await self.orchestrator.health_check(self.settings.service_api_key)


    def _generation_options(
        self, credential: str, options: Optional[Dict[str, Any]]
    ) -> GenerationOptions:
        values: Dict[str, Any] = {
            "model_chain": self.settings.model_chain,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "max_retries": self.settings.max_retries,
            "timeout": self.settings.request_timeout,
        }
        values.update(options or {})
        values["api_key"] = credential
        return GenerationOptions(**values)


    def _cached_history(self, owner_id: str) -> List[ChatMessage]:
        history: List[ChatMessage] = []
        turns = self.conversations.get_recent_turns(
            owner_id, limit=self.settings.conversation_history_size
        )
        for turn in turns:
            if turn.role == "user":
                history.append(UserMessage(content=turn.content))
            else:
                history.append(AssistantMessage(content=turn.content))
        return history


    def _record_turn(self, owner_id: str, role: str, content: str):
        self.conversations.add_turns(
            owner_id,
            [ConversationTurn(role=role, content=content, timestamp=datetime.now().isoformat())],
        )


    async def _prepare(
        self, owner_id: str, messages: List[ChatMessage], options: Optional[Dict[str, Any]]
    ) -> Tuple[List[ChatMessage], GenerationOptions, List[SearchResult]]:
        """
        Resolve the credential and build the outgoing conversation.

        Returns the messages to send (system prompt then query), the
        generation options and the documents the prompt cites.
        """
        if not messages:
            raise ValueError("messages must not be empty")

        query_index = None
        for index in range(len(messages) - 1, -1, -1):
            if messages[index].role == "user":
                query_index = index
                break
        if query_index is None:
            raise ValueError("messages must contain a user message")

        credential = self.vault.retrieve(owner_id)
        if credential is None:
            raise MissingCredentialError(owner_id)

        generation_options = self._generation_options(credential, options)

        query = messages[query_index].content or ""
        history = self._cached_history(owner_id) + list(messages[:query_index])
        retrieval = await self.prompt_builder.build(query, history)

        self._record_turn(owner_id, "user", query)

        outgoing = [SystemMessage(content=retrieval.prompt), UserMessage(content=query)]
        return outgoing, generation_options, retrieval.sources


    async def chat(
        self,
        owner_id: str,
        messages: List[ChatMessage],
        options: Optional[Dict[str, Any]] = None,
    ) -> ChatResult:
        """
        Answer the latest user message with retrieval-augmented generation.

        Args:
            owner_id: The requesting user
            messages: The conversation, latest user message last
            options: Overrides for GenerationOptions fields (model_chain,
                max_tokens, temperature, max_retries, timeout)

        Returns:
            ChatResult; failures are reported with success=False instead of raised
        """
        try:
            outgoing, generation_options, sources = await self._prepare(
                owner_id, messages, options
            )
            result = await self.orchestrator.generate(outgoing, generation_options)

        except OrchestratorError as e:
            logger.error(f"Chat failed for owner {owner_id}: {e}")
            return ChatResult(success=False, error=e.message, details=e.details)

        if not result.success:
            return ChatResult(success=False, error=result.error, details=result.details)

        self._record_turn(owner_id, "assistant", result.response)

        logger.info(
            f"Chat response for owner {owner_id}: model={result.model}, "
            f"attempt={result.attempt}, response_time={result.response_time:.0f}ms"
        )

        return ChatResult(
            success=True,
            response=result.response,
            model=result.model,
            usage=result.usage,
            attempt=result.attempt,
            sources=sources,
        )


    async def chat_stream(
        self,
        owner_id: str,
        messages: List[ChatMessage],
        options: Optional[Dict[str, Any]] = None,
    ) -> StreamResult:
        """Streaming variant of chat(); the reply is cached once the stream completes."""
        try:
            outgoing, generation_options, sources = await self._prepare(
                owner_id, messages, options
            )
            result = await self.orchestrator.generate_stream(outgoing, generation_options)

        except OrchestratorError as e:
            logger.error(f"Chat stream failed for owner {owner_id}: {e}")
            return StreamResult(success=False, error=e.message, details=e.details)

        result.sources = sources
        if result.success:
            result.stream.on_complete(
                lambda text: self._record_turn(owner_id, "assistant", text)
            )

        return result


    async def manage_credential(
        self,
        owner_id: str,
        action: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Run a credential management action.

        Args:
            owner_id: The credential owner
            action: One of ``store``, ``revalidate``, ``remove``, ``status``
            payload: ``{"api_key": ...}`` for ``store``

        Returns:
            The action's result as a dict, or ``{success: False, error, details}``

        Raises:
            ValueError: Unknown action or missing api_key for ``store``
        """
        if action not in CREDENTIAL_ACTIONS:
            raise ValueError(f"Unknown credential action: {action}")

        try:
            if action == "store":
                api_key = (payload or {}).get("api_key")
                if not api_key:
                    raise ValueError("api_key is required")
                result = await self.vault.store(owner_id, api_key)
            elif action == "revalidate":
                result = await self.vault.revalidate(owner_id)
            elif action == "remove":
                result = self.vault.remove(owner_id)
            else:
                result = self.vault.status(owner_id)

        except OrchestratorError as e:
            logger.error(f"Credential action '{action}' failed for owner {owner_id}: {e}")
            return {"success": False, "error": e.message, "details": e.details}

        return result.model_dump()
