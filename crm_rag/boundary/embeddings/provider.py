"""
Settings-driven embedding provider.

Implements the embed(orgId, text) collaborator: reads the tenant's AI
settings, reuses one provider client per tenant configuration and embeds
the query. Stored API keys are decrypted before use.

Dependencies: sqlalchemy, cryptography, crm_rag.boundary.db, crm_rag.boundary.embeddings
System role: Embedding provider used by RetrievalService
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from crm_rag.boundary.db.CRUD.system_setting_crud import system_setting_crud
from crm_rag.boundary.embeddings.clients import QueryEmbedder, create_query_embedder
from crm_rag.boundary.embeddings.config import (
    AI_SETTING_KEYS,
    EmbeddingConfig,
    resolve_embedding_config,
)
from crm_rag.boundary.embeddings.encryption import decrypt_api_key, mask_api_key
from crm_rag.configs.embedding import EmbeddingSettings
from crm_rag.core.exceptions import ChunkStoreError, EmbeddingProviderError
from crm_rag.models.retrieval import QueryEmbedding

logger = logging.getLogger(__name__)

EmbedderFactory = Callable[[EmbeddingConfig, EmbeddingSettings], QueryEmbedder]


class EmbeddingProvider(Protocol):
    """Query-embedding collaborator consumed by RetrievalService."""

    async def is_configured(self, organization_id: str) -> bool:
        ...

    async def embed_query(self, organization_id: str, text: str) -> QueryEmbedding | None:
        ...

    async def aclose(self) -> None:
        ...


class SettingsEmbeddingProvider:
    """
    Embedding provider configured per tenant through system_settings.

    Usage:
        provider = SettingsEmbeddingProvider(session_factory, settings.embedding)
        if await provider.is_configured(org_id):
            embedding = await provider.embed_query(org_id, "renewal terms")
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: EmbeddingSettings | None = None,
        embedder_factory: EmbedderFactory = create_query_embedder,
    ) -> None:
        """
        Initialize provider.

        Args:
            session_factory: Async session factory bound to the settings store
            settings: Process-wide adapter settings
            embedder_factory: Builds a client from a tenant configuration
        """
        self._session_factory = session_factory
        self._settings = settings or EmbeddingSettings()
        self._embedder_factory = embedder_factory
        self._embedders: OrderedDict[EmbeddingConfig, QueryEmbedder] = OrderedDict()
        self._evicted: set[asyncio.Task] = set()

    async def get_config(self, organization_id: str) -> EmbeddingConfig | None:
        """
        Resolve a tenant's embedding configuration.

        Args:
            organization_id: Tenant scope

        Returns:
            EmbeddingConfig | None: Config, or None when not configured

        Raises:
            ChunkStoreError: If the settings cannot be read
        """
        try:
            async with self._session_factory() as session:
                values = await system_setting_crud.get_values(
                    session, organization_id, AI_SETTING_KEYS.ALL
                )
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:get_config - Settings query failed: {type(e).__name__}: {e}",
                extra={"organization_id": organization_id},
            )
            raise ChunkStoreError(
                "Failed to read embedding settings", organization_id=organization_id
            ) from e

        return resolve_embedding_config(values, decrypt=self._decrypt_api_key)

    def _decrypt_api_key(self, stored: str) -> str:
        return decrypt_api_key(stored, self._settings.encryption_key)

    def _get_embedder(self, config: EmbeddingConfig) -> QueryEmbedder:
        """Return the cached client for a configuration, building it on first use."""
        embedder = self._embedders.get(config)
        if embedder is not None:
            self._embedders.move_to_end(config)
            return embedder

        logger.info(
            f"{__name__}:_get_embedder - Building {config.provider} client",
            extra={
                "model": config.model,
                "api_key": mask_api_key(config.api_key) if config.api_key else None,
            },
        )
        embedder = self._embedder_factory(config, self._settings)
        self._embedders[config] = embedder
        while len(self._embedders) > self._settings.client_cache_size:
            _, stale = self._embedders.popitem(last=False)
            task = asyncio.ensure_future(stale.aclose())
            self._evicted.add(task)
            task.add_done_callback(self._evicted.discard)
        return embedder

    async def aclose(self) -> None:
        """Close every cached provider client."""
        embedders = list(self._embedders.values())
        self._embedders.clear()
        for embedder in embedders:
            await embedder.aclose()
        if self._evicted:
            await asyncio.gather(*self._evicted)

    async def is_configured(self, organization_id: str) -> bool:
        """Check if embedding is configured for a tenant."""
        return await self.get_config(organization_id) is not None

    async def embed_query(self, organization_id: str, text: str) -> QueryEmbedding | None:
        """
        Embed a query with the tenant's configured provider.

        Args:
            organization_id: Tenant scope
            text: Query text

        Returns:
            QueryEmbedding | None: Embedding, or None when not configured

        Raises:
            EmbeddingProviderError: If the provider call fails or returns no vector
        """
        config = await self.get_config(organization_id)
        if config is None:
            return None

        try:
            embedder = self._get_embedder(config)
            vector = await embedder.embed(text)
        except Exception as e:
            raise EmbeddingProviderError(
                f"Embedding request failed: {type(e).__name__}: {e}",
                provider=config.provider,
                organization_id=organization_id,
            ) from e

        if not vector:
            raise EmbeddingProviderError(
                "Embedding provider returned an empty vector",
                provider=config.provider,
                organization_id=organization_id,
            )

        return QueryEmbedding(
            vector=[float(v) for v in vector],
            model=config.model,
            dimensions=len(vector),
        )
