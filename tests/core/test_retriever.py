"""
Test suite for ranking and candidate resolution.

System role: Verification of find_similar_chunks ordering and cache routing
"""

from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from crm_rag.core.embedding_cache import EmbeddingCache
from crm_rag.core.exceptions import ChunkStoreError, ValidationError
from crm_rag.core.retriever import ChunkRetriever, rank_chunks
from crm_rag.models.chunk import ChunkLoadResult

ORG = "org-1"


@pytest.fixture
def corpus(make_chunk):
    """Provide chunks with known similarity to the query [1, 0]."""
    return (
        make_chunk([1.0, 0.0], chunk_id="exact"),
        make_chunk([0.0, 1.0], chunk_id="orthogonal"),
        make_chunk([1.0, 1.0], chunk_id="diagonal"),
        make_chunk([0.9, 0.1], chunk_id="close"),
        make_chunk([-1.0, 0.0], chunk_id="opposite"),
    )


@pytest.fixture
def loader(corpus) -> MagicMock:
    """Provide mock ChunkLoader returning the corpus."""
    mock = MagicMock()
    mock.load = AsyncMock(return_value=ChunkLoadResult(chunks=corpus, cacheable=True))
    return mock


@pytest.fixture
def cache(clock) -> EmbeddingCache:
    """Provide empty cache."""
    return EmbeddingCache(clock=clock)


@pytest.fixture
def retriever(loader: MagicMock, cache: EmbeddingCache) -> ChunkRetriever:
    """Provide retriever over the mock loader."""
    return ChunkRetriever(loader=loader, cache=cache)


class TestRankChunks:
    """Test suite for rank_chunks()."""

    def test_should_sort_descending_and_apply_threshold(self, corpus) -> None:
        """Test only chunks at or above min_score are returned, best first."""
        results = rank_chunks(corpus, [1.0, 0.0], top_k=5, min_score=0.7)

        assert [r.chunk_id for r in results] == ["exact", "close", "diagonal"]
        assert results[0].score == 1.0
        assert all(r.score >= 0.7 for r in results)

    def test_should_truncate_to_top_k(self, corpus) -> None:
        """Test result length never exceeds top_k."""
        results = rank_chunks(corpus, [1.0, 0.0], top_k=2, min_score=-1.0)

        assert len(results) == 2
        assert [r.chunk_id for r in results] == ["exact", "close"]

    def test_score_equal_to_threshold_should_be_kept(self, make_chunk) -> None:
        """Test the threshold is inclusive."""
        chunk = make_chunk([1.0, 0.0])

        results = rank_chunks([chunk], [1.0, 0.0], top_k=5, min_score=1.0)

        assert len(results) == 1

    def test_ties_should_keep_scan_order(self, make_chunk) -> None:
        """Test equal scores are not reordered."""
        chunks = [
            make_chunk([2.0, 0.0], chunk_id="first"),
            make_chunk([1.0, 0.0], chunk_id="second"),
            make_chunk([3.0, 0.0], chunk_id="third"),
        ]

        results = rank_chunks(chunks, [1.0, 0.0], top_k=5, min_score=0.5)

        assert [r.chunk_id for r in results] == ["first", "second", "third"]

    def test_dimension_mismatch_should_be_excluded(self, make_chunk) -> None:
        """Test chunks from another embedding space score 0 and drop out."""
        chunks = [make_chunk([1.0, 0.0, 0.0], chunk_id="old-model"), make_chunk([1.0, 0.0])]

        results = rank_chunks(chunks, [1.0, 0.0], top_k=5, min_score=0.7)

        assert "old-model" not in {r.chunk_id for r in results}

    def test_random_corpus_should_respect_bounds(self, make_chunk) -> None:
        """Test size, threshold and ordering on random data."""
        rng = np.random.default_rng(3)
        chunks = [make_chunk(rng.normal(size=8)) for _ in range(200)]
        query = rng.normal(size=8)

        for top_k, min_score in [(1, 0.0), (5, 0.2), (50, -1.0), (10, 0.9)]:
            results = rank_chunks(chunks, query, top_k=top_k, min_score=min_score)
            scores = [r.score for r in results]

            assert len(results) <= top_k
            assert all(score >= min_score for score in scores)
            assert scores == sorted(scores, reverse=True)

    def test_scored_chunk_should_carry_identity(self, make_chunk) -> None:
        """Test result fields come from the chunk."""
        chunk = make_chunk([1.0], document_id="doc-9", content="hello", chunk_index=4, chunk_id="c-1")

        result = rank_chunks([chunk], [1.0], top_k=1, min_score=0.0)[0]

        assert (result.chunk_id, result.document_id, result.content, result.chunk_index) == (
            "c-1", "doc-9", "hello", 4,
        )


class TestChunkRetrieverFindSimilarChunks:
    """Test suite for ChunkRetriever.find_similar_chunks()."""

    @pytest.mark.asyncio
    async def test_unscoped_query_should_populate_cache(
        self, retriever: ChunkRetriever, loader: MagicMock, cache: EmbeddingCache
    ) -> None:
        """Test whole-tenant queries load once and then hit the cache."""
        await retriever.find_similar_chunks(ORG, [1.0, 0.0])
        await retriever.find_similar_chunks(ORG, [0.0, 1.0])

        loader.load.assert_awaited_once_with(ORG)
        assert cache.organization_ids == [ORG]

    @pytest.mark.asyncio
    async def test_scoped_query_should_bypass_cache(
        self, retriever: ChunkRetriever, loader: MagicMock, cache: EmbeddingCache
    ) -> None:
        """Test document-filtered queries never write the cache."""
        await retriever.find_similar_chunks(ORG, [1.0, 0.0], document_ids=["doc-1"])
        await retriever.find_similar_chunks(ORG, [1.0, 0.0], document_ids=["doc-1"])

        assert loader.load.await_count == 2
        loader.load.assert_awaited_with(ORG, ["doc-1"])
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_scoped_query_should_not_read_cached_entry(
        self, retriever: ChunkRetriever, loader: MagicMock, cache: EmbeddingCache, make_chunk
    ) -> None:
        """Test a cached tenant set is ignored for filtered queries."""
        cached_only = (make_chunk([1.0, 0.0], chunk_id="cached-only"),)
        cache.put(ORG, cached_only)
        loader.load.return_value = ChunkLoadResult(chunks=(), cacheable=False)

        results = await retriever.find_similar_chunks(ORG, [1.0, 0.0], document_ids=[])

        assert results == []
        assert cache.get(ORG) == cached_only

    @pytest.mark.asyncio
    async def test_empty_tenant_should_return_empty_list(
        self, retriever: ChunkRetriever, loader: MagicMock
    ) -> None:
        """Test zero candidates yields no results."""
        loader.load.return_value = ChunkLoadResult(chunks=(), cacheable=True)

        assert await retriever.find_similar_chunks(ORG, [1.0, 0.0]) == []

    @pytest.mark.asyncio
    async def test_should_apply_top_k_and_min_score(self, retriever: ChunkRetriever) -> None:
        """Test ranking controls are forwarded."""
        results = await retriever.find_similar_chunks(ORG, [1.0, 0.0], top_k=1, min_score=0.5)

        assert [r.chunk_id for r in results] == ["exact"]

    @pytest.mark.asyncio
    async def test_invalid_top_k_should_raise(self, retriever: ChunkRetriever) -> None:
        """Test top_k below 1 is rejected."""
        with pytest.raises(ValidationError):
            await retriever.find_similar_chunks(ORG, [1.0, 0.0], top_k=0)

    @pytest.mark.asyncio
    async def test_non_cacheable_full_load_should_not_be_cached(
        self, retriever: ChunkRetriever, loader: MagicMock, cache: EmbeddingCache, corpus
    ) -> None:
        """Test a load marked as filtered never becomes the tenant's cache entry."""
        loader.load.return_value = ChunkLoadResult(chunks=corpus, cacheable=False)

        with pytest.raises(ChunkStoreError):
            await retriever.find_similar_chunks(ORG, [1.0, 0.0])

        assert len(cache) == 0
