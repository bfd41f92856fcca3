"""
Unit tests for KnowledgeStore.

Uses a keyword-count embedding so similarity is predictable.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from chat_orchestrator.embeddings import FunctionEmbedding
from chat_orchestrator.exceptions import EmbeddingError, NotFoundError
from chat_orchestrator.knowledge import DEFAULT_CORPUS, KnowledgeStore
from chat_orchestrator.models import DocumentFilter, DocumentInput, DocumentUpdate

KEYWORDS = ["mcp", "agent", "saas", "enterprise"]


def keyword_vector(text):
    words = text.lower()
    return [float(words.count(keyword)) for keyword in KEYWORDS]


@pytest.fixture
def embedding():
    return FunctionEmbedding(keyword_vector, dimension=len(KEYWORDS), model_name="keywords")


@pytest.fixture
def knowledge_store(embedding):
    return KnowledgeStore(embedding)


@pytest.mark.asyncio
async def test_mcp_example(knowledge_store):
    """Test the single-document MCP lookup returns the document with positive similarity."""
    await knowledge_store.add_document(
        DocumentInput(id="d1", title="Orchestration", content="multi-agent orchestration uses MCP")
    )

    results = await knowledge_store.search("MCP protocol", 1)

    assert len(results) == 1
    assert results[0].id == "d1"
    assert results[0].similarity > 0


@pytest.mark.asyncio
async def test_exact_content_ranks_first(knowledge_store):
    """Test that querying with a document's own content returns it first with similarity 1."""
    await knowledge_store.add_document(DocumentInput(id="saas", title="SaaS", content="saas pricing"))
    await knowledge_store.add_document(
        DocumentInput(id="ent", title="Enterprise", content="enterprise agent rollout")
    )

    results = await knowledge_store.search("enterprise agent rollout", 2)

    assert results[0].id == "ent"
    assert results[0].similarity == pytest.approx(1.0)
    assert results[0].similarity >= results[1].similarity


@pytest.mark.asyncio
async def test_search_limit_and_empty(knowledge_store):
    assert await knowledge_store.search("anything", 3) == []

    await knowledge_store.seed(DEFAULT_CORPUS)

    assert len(await knowledge_store.search("mcp agent", 2)) == 2
    assert await knowledge_store.search("mcp agent", 0) == []


@pytest.mark.asyncio
async def test_seed_default_corpus(knowledge_store):
    count = await knowledge_store.seed(DEFAULT_CORPUS)

    assert count == 4
    assert knowledge_store.get_document("custom-mcp-server") is not None

    results = await knowledge_store.search("How do I build an MCP server?", 1)
    assert results[0].id == "custom-mcp-server"


@pytest.mark.asyncio
async def test_add_overwrites_same_id(knowledge_store):
    first = await knowledge_store.add_document(
        DocumentInput(id="d1", title="Old", content="saas")
    )
    second = await knowledge_store.add_document(
        DocumentInput(id="d1", title="New", content="enterprise")
    )

    assert knowledge_store.stats().total_documents == 1
    assert second.title == "New"
    assert second.created_at == first.created_at
    assert second.embedding == keyword_vector("enterprise")


@pytest.mark.asyncio
async def test_add_embedding_failure_leaves_no_document():
    """Test that a failed embedding raises EmbeddingError and stores nothing."""
    embedding = Mock()
    embedding.model_name = "broken"
    embedding.embed_document = AsyncMock(side_effect=RuntimeError("embedding service down"))
    knowledge_store = KnowledgeStore(embedding)

    with pytest.raises(EmbeddingError):
        await knowledge_store.add_document(DocumentInput(id="d1", title="T", content="mcp"))

    assert knowledge_store.get_document("d1") is None
    assert knowledge_store.stats().total_documents == 0


@pytest.mark.asyncio
async def test_search_embedding_failure():
    embedding = Mock()
    embedding.model_name = "broken"
    embedding.embed_query = AsyncMock(side_effect=RuntimeError("timeout"))
    knowledge_store = KnowledgeStore(embedding)

    with pytest.raises(EmbeddingError) as exc_info:
        await knowledge_store.search("mcp", 3)

    assert exc_info.value.details == "timeout"


@pytest.mark.asyncio
async def test_update_content_re_embeds(knowledge_store):
    """Test that the stored embedding always matches the current content."""
    await knowledge_store.add_document(DocumentInput(id="d1", title="T", content="saas"))

    updated = await knowledge_store.update_document("d1", DocumentUpdate(content="mcp mcp agent"))

    assert updated.content == "mcp mcp agent"
    assert updated.embedding == keyword_vector("mcp mcp agent")
    assert knowledge_store.get_document("d1").embedding == keyword_vector("mcp mcp agent")


@pytest.mark.asyncio
async def test_update_content_changes_search_ranking(knowledge_store):
    """Test that searching for the new content ranks the updated document above its old score."""
    await knowledge_store.add_document(DocumentInput(id="d1", title="T", content="saas"))
    await knowledge_store.add_document(DocumentInput(id="d2", title="U", content="mcp agent saas"))

    before = await knowledge_store.search("mcp mcp agent", 2)
    assert [result.id for result in before] == ["d2", "d1"]
    old_similarity = before[1].similarity

    await knowledge_store.update_document("d1", DocumentUpdate(content="mcp mcp agent"))

    after = await knowledge_store.search("mcp mcp agent", 2)
    assert after[0].id == "d1"
    assert after[0].similarity > old_similarity
    assert after[0].similarity == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_update_metadata_only_skips_embedding():
    embed_spy = Mock(side_effect=keyword_vector)
    knowledge_store = KnowledgeStore(FunctionEmbedding(embed_spy, dimension=len(KEYWORDS)))
    await knowledge_store.add_document(DocumentInput(id="d1", title="T", content="saas"))

    updated = await knowledge_store.update_document(
        "d1", DocumentUpdate(title="Renamed", tags=["pricing"])
    )

    assert embed_spy.call_count == 1
    assert updated.title == "Renamed"
    assert updated.tags == ["pricing"]
    assert updated.content == "saas"


@pytest.mark.asyncio
async def test_update_missing_document(knowledge_store):
    with pytest.raises(NotFoundError):
        await knowledge_store.update_document("nope", DocumentUpdate(title="x"))


@pytest.mark.asyncio
async def test_update_embedding_failure_keeps_old_document(knowledge_store):
    await knowledge_store.add_document(DocumentInput(id="d1", title="T", content="saas"))
    knowledge_store.embedding = Mock()
    knowledge_store.embedding.embed_document = AsyncMock(side_effect=RuntimeError("down"))

    with pytest.raises(EmbeddingError):
        await knowledge_store.update_document("d1", DocumentUpdate(content="enterprise"))

    document = knowledge_store.get_document("d1")
    assert document.content == "saas"
    assert document.embedding == keyword_vector("saas")


@pytest.mark.asyncio
async def test_delete_document(knowledge_store):
    await knowledge_store.add_document(DocumentInput(id="d1", title="T", content="saas"))

    assert knowledge_store.delete_document("d1").success is True
    assert knowledge_store.delete_document("d1").success is False
    assert knowledge_store.get_document("d1") is None


@pytest.mark.asyncio
async def test_find_by_tag(knowledge_store):
    await knowledge_store.seed(DEFAULT_CORPUS)

    tagged = knowledge_store.find_by_tag("mcp-protocol")

    assert "custom-mcp-server" in [document.id for document in tagged]
    assert knowledge_store.find_by_tag("no-such-tag") == []


@pytest.mark.asyncio
async def test_stats(knowledge_store):
    await knowledge_store.add_document(
        DocumentInput(id="d1", title="First", content="saas", tags=["business"])
    )
    await knowledge_store.add_document(DocumentInput(id="d2", title="Second", content="mcp agent"))

    stats = knowledge_store.stats()

    assert stats.total_documents == 2
    assert [summary.id for summary in stats.document_summaries] == ["d1", "d2"]
    assert stats.document_summaries[0].content_length == 4
    assert stats.document_summaries[0].tags == ["business"]


@pytest.mark.asyncio
async def test_search_with_tag_filter(knowledge_store):
    await knowledge_store.seed(DEFAULT_CORPUS)

    results = await knowledge_store.search(
        "mcp agent saas enterprise", 5, DocumentFilter(tags=["mcp-protocol"])
    )

    assert results
    assert all("mcp-protocol" in result.tags for result in results)
    assert len(results) == len(knowledge_store.find_by_tag("mcp-protocol"))


@pytest.mark.asyncio
async def test_search_with_metadata_filter_applies_before_limit(knowledge_store):
    await knowledge_store.add_document(
        DocumentInput(id="d1", title="A", content="mcp mcp", metadata={"source": "blog"})
    )
    await knowledge_store.add_document(
        DocumentInput(id="d2", title="B", content="mcp agent", metadata={"source": "paper"})
    )

    unfiltered = await knowledge_store.search("mcp", 1)
    filtered = await knowledge_store.search("mcp", 1, DocumentFilter(metadata={"source": "paper"}))

    assert unfiltered[0].id == "d1"
    assert [result.id for result in filtered] == ["d2"]
    assert filtered[0].metadata == {"source": "paper"}
    assert await knowledge_store.search("mcp", 3, DocumentFilter(tags=["missing"])) == []
