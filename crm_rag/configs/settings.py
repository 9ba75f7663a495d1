"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from crm_rag.configs.base import CrmRagBaseSettings
from crm_rag.configs.database import DatabaseSettings
from crm_rag.configs.embedding import EmbeddingSettings
from crm_rag.configs.retrieval import RetrievalSettings


class Settings(CrmRagBaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    retrieval: RetrievalSettings = RetrievalSettings()
    embedding: EmbeddingSettings = EmbeddingSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from crm_rag.configs import get_settings
        settings = get_settings()
    """
    return Settings()
