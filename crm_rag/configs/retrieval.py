"""
Retrieval configuration settings.

Cache bounds, ranking defaults and query deadlines for the retrieval engine.

Dependencies: pydantic, pydantic_settings
System role: Tuning knobs for EmbeddingCache and RetrievalService
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from crm_rag.configs.base import CrmRagBaseSettings


class RetrievalSettings(CrmRagBaseSettings):
    """Retrieval engine configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    cache_ttl_seconds: float = Field(
        default=300.0,
        description="Age after which a cached tenant chunk set is no longer trusted",
        gt=0,
    )
    max_cached_orgs: int = Field(
        default=3,
        description="Maximum number of tenants held in the embedding cache",
        ge=1,
    )
    default_top_k: int = Field(default=5, description="Number of chunks returned per query", ge=1)
    default_min_score: float = Field(
        default=0.7,
        description="Minimum cosine similarity for a chunk to be returned",
        ge=-1.0,
        le=1.0,
    )
    timeout_seconds: float | None = Field(
        default=None,
        description="Default deadline applied to each I/O stage of a query (None = unbounded)",
    )
    unknown_document_name: str = Field(
        default="未知文件",
        description="Display name used when a chunk's document is missing from the catalog",
    )
