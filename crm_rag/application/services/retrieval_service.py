"""
Retrieval service orchestrator.

Runs a RAG query for one tenant: configuration check, query embedding, scope
resolution, candidate lookup (cache or direct load), ranking, document name
enrichment and context formatting.

Two "no augmentation" outcomes are returned rather than raised:
    None                      embedding unavailable (not configured or provider failed)
    RagResult(context="")     nothing cleared the similarity threshold

Timeouts and store/catalog failures propagate as exceptions.

Dependencies: crm_rag.core, crm_rag.boundary.embeddings, crm_rag.application.adapters
System role: RetrievalOrchestrator use case
"""

import asyncio
import logging
from typing import Awaitable, Iterable, TypeVar

from sqlalchemy.ext.asyncio import async_sessionmaker

from crm_rag.application.adapters.document_catalog_adapter import DocumentCatalog
from crm_rag.boundary.embeddings.provider import (
    EmbeddingProvider,
    SettingsEmbeddingProvider,
)
from crm_rag.configs import Settings
from crm_rag.configs.retrieval import RetrievalSettings
from crm_rag.core.chunk_loader import ChunkLoader
from crm_rag.core.context_formatter import format_rag_context
from crm_rag.core.embedding_cache import EmbeddingCache
from crm_rag.core.exceptions import (
    EmbeddingProviderError,
    RetrievalTimeoutError,
)
from crm_rag.core.retriever import ChunkRetriever
from crm_rag.core.similarity import VectorLike
from crm_rag.models.retrieval import RagQueryOptions, RagResult, RagSource, ScoredChunk
from crm_rag.observability.log_utils import log_retrieval_event

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetrievalService:
    """
    RAG retrieval orchestrator.

    Construct once per process and share between requests; the embedding
    cache inside the retriever is the only mutable shared state.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        retriever: ChunkRetriever,
        catalog: DocumentCatalog,
        settings: RetrievalSettings | None = None,
    ) -> None:
        """
        Initialize retrieval service.

        Args:
            provider: Query embedding provider
            retriever: Candidate lookup and ranking
            catalog: Document catalog for scope expansion and names
            settings: Ranking defaults and deadlines
        """
        self.provider = provider
        self.retriever = retriever
        self.catalog = catalog
        self.settings = settings or RetrievalSettings()

    async def rag_query(
        self,
        organization_id: str,
        query: str,
        options: RagQueryOptions | None = None,
    ) -> RagResult | None:
        """
        Retrieve prompt context relevant to a query.

        Args:
            organization_id: Tenant scope
            query: Free-text query
            options: Scope filters, ranking controls and deadline

        Returns:
            RagResult | None: Context and sources, an empty RagResult when
                nothing matched, or None when embedding is unavailable

        Raises:
            RetrievalTimeoutError: If the deadline expires in any I/O stage
            ChunkStoreError: If chunks or settings cannot be read
            DocumentCatalogError: If the document catalog cannot be read
        """
        options = options or RagQueryOptions()
        timeout = self._resolve_timeout(options)
        top_k = options.top_k or self.settings.default_top_k
        min_score = (
            options.min_score
            if options.min_score is not None
            else self.settings.default_min_score
        )

        query_vector = await self._embed_query(organization_id, query, timeout)
        if query_vector is None:
            return None

        scope = await self._resolve_scope(organization_id, options, timeout)

        matches = await self._with_deadline(
            "chunk_load",
            timeout,
            organization_id,
            self.retriever.find_similar_chunks(
                organization_id,
                query_vector,
                top_k=top_k,
                min_score=min_score,
                document_ids=scope,
            ),
        )

        if not matches:
            log_retrieval_event(
                logger,
                logging.INFO,
                f"{__name__}:rag_query - No chunks above threshold",
                organization_id,
                min_score=min_score,
                scoped=scope is not None,
            )
            return RagResult()

        sources = await self._build_sources(organization_id, matches, timeout)
        log_retrieval_event(
            logger,
            logging.INFO,
            f"{__name__}:rag_query - Retrieved {len(sources)} sources",
            organization_id,
            top_score=sources[0].score,
            document_ids=list(dict.fromkeys(source.document_id for source in sources)),
            scoped=scope is not None,
        )
        return RagResult(context=format_rag_context(sources), sources=sources)

    async def find_similar_chunks(
        self,
        organization_id: str,
        query_embedding: VectorLike,
        top_k: int | None = None,
        min_score: float | None = None,
        document_ids: Iterable[str] | None = None,
        timeout_seconds: float | None = None,
    ) -> list[ScoredChunk]:
        """
        Rank a tenant's chunks against an existing query embedding.

        Args:
            organization_id: Tenant scope
            query_embedding: Query vector
            top_k: Maximum number of results (default from settings)
            min_score: Similarity floor (default from settings)
            document_ids: Optional document filter; bypasses the cache
            timeout_seconds: Deadline for the chunk load

        Returns:
            list[ScoredChunk]: Ranked chunks, highest score first

        Raises:
            ValidationError: If top_k is smaller than 1
            RetrievalTimeoutError: If the deadline expires
            ChunkStoreError: If chunks cannot be read
        """
        if top_k is None:
            top_k = self.settings.default_top_k
        if min_score is None:
            min_score = self.settings.default_min_score
        timeout = timeout_seconds if timeout_seconds is not None else self.settings.timeout_seconds

        return await self._with_deadline(
            "chunk_load",
            timeout,
            organization_id,
            self.retriever.find_similar_chunks(
                organization_id,
                query_embedding,
                top_k=top_k,
                min_score=min_score,
                document_ids=None if document_ids is None else list(document_ids),
            ),
        )

    def invalidate_embedding_cache(self, organization_id: str) -> None:
        """
        Drop a tenant's cached chunk set.

        Called whenever the tenant's chunks are re-embedded or its embedding
        provider/model changes, so later queries never mix embedding spaces.

        Args:
            organization_id: Tenant to invalidate
        """
        self.retriever.cache.invalidate(organization_id)

    def _resolve_timeout(self, options: RagQueryOptions) -> float | None:
        if options.timeout_seconds is not None:
            return options.timeout_seconds
        return self.settings.timeout_seconds

    async def _embed_query(
        self,
        organization_id: str,
        query: str,
        timeout: float | None,
    ) -> list[float] | None:
        """Check the provider and embed the query; None means unavailable."""
        configured = await self._with_deadline(
            "embedding", timeout, organization_id,
            self.provider.is_configured(organization_id),
        )
        if not configured:
            logger.info(
                f"{__name__}:rag_query - Embedding not configured, skipping retrieval",
                extra={"organization_id": organization_id},
            )
            return None

        try:
            embedding = await self._with_deadline(
                "embedding", timeout, organization_id,
                self.provider.embed_query(organization_id, query),
            )
        except EmbeddingProviderError as e:
            log_retrieval_event(
                logger,
                logging.WARNING,
                f"{__name__}:rag_query - Embedding provider failed, skipping retrieval",
                organization_id,
                error=e.message,
                provider=e.details.get("provider"),
            )
            return None

        if embedding is None:
            return None
        return embedding.vector

    async def _resolve_scope(
        self,
        organization_id: str,
        options: RagQueryOptions,
        timeout: float | None,
    ) -> list[str] | None:
        """Effective document filter; None means the whole tenant."""
        if options.document_ids is not None:
            return list(options.document_ids)

        if options.customer_id is not None:
            document_ids = await self._with_deadline(
                "document_catalog", timeout, organization_id,
                self.catalog.get_customer_document_ids(organization_id, options.customer_id),
            )
            if not document_ids:
                logger.info(
                    f"{__name__}:rag_query - Customer has no documents",
                    extra={"organization_id": organization_id, "customer_id": options.customer_id},
                )
            return list(document_ids)

        return None

    async def _build_sources(
        self,
        organization_id: str,
        matches: list[ScoredChunk],
        timeout: float | None,
    ) -> list[RagSource]:
        """Attach document names to ranked chunks with one catalog lookup."""
        document_ids = list(dict.fromkeys(match.document_id for match in matches))
        names = await self._with_deadline(
            "document_catalog", timeout, organization_id,
            self.catalog.get_document_names(organization_id, document_ids),
        )

        return [
            RagSource(
                document_id=match.document_id,
                document_name=names.get(match.document_id, self.settings.unknown_document_name),
                chunk_content=match.content,
                chunk_index=match.chunk_index,
                score=match.score,
            )
            for match in matches
        ]

    async def _with_deadline(
        self,
        stage: str,
        timeout: float | None,
        organization_id: str,
        awaitable: Awaitable[T],
    ) -> T:
        """Await one I/O stage, converting an expired deadline to RetrievalTimeoutError."""
        if timeout is None:
            return await awaitable

        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as e:
            log_retrieval_event(
                logger,
                logging.WARNING,
                f"{__name__}:rag_query - Deadline expired during {stage}",
                organization_id,
                stage=stage,
                timeout_seconds=timeout,
            )
            raise RetrievalTimeoutError(
                stage=stage,
                timeout_seconds=timeout,
                organization_id=organization_id,
            ) from e


def build_retrieval_service(
    settings: Settings,
    session_factory: async_sessionmaker,
) -> RetrievalService:
    """
    Wire a RetrievalService from settings and a session factory.

    Args:
        settings: Application settings
        session_factory: Async session factory for the relational store

    Returns:
        RetrievalService: Service with a fresh, empty embedding cache
    """
    cache = EmbeddingCache(
        ttl_seconds=settings.retrieval.cache_ttl_seconds,
        max_entries=settings.retrieval.max_cached_orgs,
    )
    retriever = ChunkRetriever(loader=ChunkLoader(session_factory), cache=cache)
    return RetrievalService(
        provider=SettingsEmbeddingProvider(session_factory, settings.embedding),
        retriever=retriever,
        catalog=DocumentCatalog(session_factory),
        settings=settings.retrieval,
    )
