"""
Provider clients for query embedding.

Google and Ollama go through their LangChain embedding integrations; OpenAI
goes through the official async SDK.

Dependencies: langchain-google-genai, langchain-community, openai
System role: Embedding provider adapters
"""

import logging
from typing import Protocol

from langchain_core.embeddings import Embeddings

from crm_rag.boundary.embeddings.config import EmbeddingConfig
from crm_rag.configs.embedding import EmbeddingSettings

logger = logging.getLogger(__name__)


class QueryEmbedder(Protocol):
    """Embeds a single query string; closed when evicted from the client cache."""

    async def embed(self, text: str) -> list[float]:
        ...

    async def aclose(self) -> None:
        ...


class LangChainQueryEmbedder:
    """Adapter over a LangChain Embeddings implementation."""

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    async def embed(self, text: str) -> list[float]:
        return list(await self._embeddings.aembed_query(text))

    async def aclose(self) -> None:
        pass


class OpenAIQueryEmbedder:
    """Adapter over the OpenAI async embeddings endpoint."""

    def __init__(self, api_key: str, model: str, timeout: float) -> None:
        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._model = model

    async def embed(self, text: str) -> list[float]:
        response = await self._client.embeddings.create(model=self._model, input=text)
        return list(response.data[0].embedding)

    async def aclose(self) -> None:
        await self._client.close()


def create_query_embedder(config: EmbeddingConfig, settings: EmbeddingSettings) -> QueryEmbedder:
    """
    Build the client for a tenant's embedding configuration.

    Args:
        config: Resolved tenant configuration
        settings: Process-wide adapter settings

    Returns:
        QueryEmbedder: Client for the configured provider

    Raises:
        ValueError: If the provider has no adapter
    """
    logger.debug(
        f"{__name__}:create_query_embedder - provider={config.provider}, model={config.model}"
    )

    if config.provider == "google":
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        model = config.model if config.model.startswith("models/") else f"models/{config.model}"
        return LangChainQueryEmbedder(
            GoogleGenerativeAIEmbeddings(
                model=model,
                google_api_key=config.api_key,
                task_type="retrieval_query",
            )
        )

    if config.provider == "ollama":
        from langchain_community.embeddings import OllamaEmbeddings

        return LangChainQueryEmbedder(
            OllamaEmbeddings(
                base_url=config.endpoint or settings.ollama_base_url,
                model=config.model,
            )
        )

    if config.provider == "openai":
        return OpenAIQueryEmbedder(
            api_key=config.api_key or "",
            model=config.model,
            timeout=settings.request_timeout_seconds,
        )

    raise ValueError(f"Unsupported embedding provider: {config.provider}")
