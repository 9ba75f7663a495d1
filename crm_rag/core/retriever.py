"""
Similarity search over a tenant's chunks.

Resolves the candidate chunk set (full-tenant via the cache, filtered via a
direct load), scores every candidate against the query vector and returns
the ranked top-k.

Dependencies: crm_rag.core.chunk_loader, crm_rag.core.embedding_cache, crm_rag.core.similarity
System role: Exact linear-scan vector search
"""

import logging
from typing import Iterable, Sequence

from crm_rag.core.chunk_loader import ChunkLoader
from crm_rag.core.embedding_cache import EmbeddingCache
from crm_rag.core.exceptions import ChunkStoreError, ValidationError
from crm_rag.core.similarity import VectorLike, as_vector, cosine_similarity
from crm_rag.models.chunk import Chunk
from crm_rag.models.retrieval import ScoredChunk

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5
DEFAULT_MIN_SCORE = 0.7


def rank_chunks(
    chunks: Iterable[Chunk],
    query_vector: VectorLike,
    top_k: int = DEFAULT_TOP_K,
    min_score: float = DEFAULT_MIN_SCORE,
) -> list[ScoredChunk]:
    """
    Score, filter and rank candidate chunks.

    Equal scores keep the candidates' scan order (stable sort); no secondary
    key is applied.

    Args:
        chunks: Candidate chunks in scan order
        query_vector: Query embedding
        top_k: Maximum number of results
        min_score: Minimum score a chunk needs to be kept

    Returns:
        list[ScoredChunk]: At most top_k chunks, highest score first
    """
    query = as_vector(query_vector)

    scored: list[ScoredChunk] = []
    for chunk in chunks:
        score = cosine_similarity(chunk.embedding, query)
        if score >= min_score:
            scored.append(
                ScoredChunk(
                    chunk_id=chunk.chunk_id,
                    document_id=chunk.document_id,
                    content=chunk.content,
                    chunk_index=chunk.chunk_index,
                    score=score,
                )
            )

    scored.sort(key=lambda c: c.score, reverse=True)
    return scored[:top_k]


class ChunkRetriever:
    """Candidate resolution plus ranking for one tenant at a time."""

    def __init__(self, loader: ChunkLoader, cache: EmbeddingCache) -> None:
        """
        Initialize retriever.

        Args:
            loader: Chunk store loader
            cache: Shared full-tenant embedding cache
        """
        self._loader = loader
        self._cache = cache

    @property
    def cache(self) -> EmbeddingCache:
        """The shared embedding cache."""
        return self._cache

    async def get_candidates(
        self,
        organization_id: str,
        document_ids: Iterable[str] | None = None,
    ) -> Sequence[Chunk]:
        """
        Obtain the chunks a query is scored against.

        Without a document filter the full tenant set comes from the cache
        (loaded and cached on a miss). With a filter, including an empty
        one, the store is queried directly and the cache is neither read
        nor written.

        Args:
            organization_id: Tenant scope
            document_ids: Optional document filter

        Returns:
            Sequence[Chunk]: Candidate chunks in scan order
        """
        if document_ids is None:
            return await self._cache.get_or_load(
                organization_id,
                lambda: self._load_full_tenant(organization_id),
            )

        result = await self._loader.load(organization_id, document_ids)
        return result.chunks

    async def find_similar_chunks(
        self,
        organization_id: str,
        query_embedding: VectorLike,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        document_ids: Iterable[str] | None = None,
    ) -> list[ScoredChunk]:
        """
        Find the chunks most similar to a query embedding.

        Args:
            organization_id: Tenant scope
            query_embedding: Query vector
            top_k: Maximum number of results (>= 1)
            min_score: Similarity floor
            document_ids: Optional document filter

        Returns:
            list[ScoredChunk]: Ranked chunks, highest score first

        Raises:
            ValidationError: If top_k is smaller than 1
            ChunkStoreError: If the chunk store cannot be read
        """
        if top_k < 1:
            raise ValidationError("top_k must be at least 1", field="top_k")

        chunks = await self.get_candidates(organization_id, document_ids)
        if not chunks:
            return []

        results = rank_chunks(chunks, query_embedding, top_k=top_k, min_score=min_score)
        logger.debug(
            f"{__name__}:find_similar_chunks - {len(results)}/{len(chunks)} chunks matched",
            extra={"organization_id": organization_id},
        )
        return results

    async def _load_full_tenant(self, organization_id: str) -> tuple[Chunk, ...]:
        """Load the unfiltered chunk set that the cache may hold."""
        result = await self._loader.load(organization_id)
        if not result.cacheable:
            # only a complete tenant set may be cached
            raise ChunkStoreError(
                "Full-tenant load returned a filtered chunk set",
                organization_id=organization_id,
            )
        return result.chunks
