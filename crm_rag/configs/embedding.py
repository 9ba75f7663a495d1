"""
Embedding provider configuration settings.

Process-wide defaults for the provider adapters. Per-tenant provider, model
and API key live in the system_settings table, not here.

Dependencies: pydantic, pydantic_settings
System role: Embedding adapter configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from crm_rag.configs.base import CrmRagBaseSettings


class EmbeddingSettings(CrmRagBaseSettings):
    """Embedding adapter configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for a single provider embedding request",
        gt=0,
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama endpoint used when a tenant does not configure one",
    )
    encryption_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AI_ENCRYPTION_KEY", "EMBEDDING_ENCRYPTION_KEY"),
        description="Secret the stored tenant API keys are encrypted under",
    )
    client_cache_size: int = Field(
        default=16,
        description="Provider clients kept alive across queries",
        ge=1,
    )
