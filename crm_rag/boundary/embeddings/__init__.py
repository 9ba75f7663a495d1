"""
Embedding provider boundary.

Resolves each tenant's embedding configuration from system settings,
decrypts stored API keys and embeds query text with the configured provider.
Also gates AI features per tenant.
"""

from crm_rag.boundary.embeddings.config import (
    AI_SETTING_KEYS,
    EmbeddingConfig,
    is_embedding_capable,
    parse_ai_features,
    resolve_embedding_config,
)
from crm_rag.boundary.embeddings.clients import QueryEmbedder, create_query_embedder
from crm_rag.boundary.embeddings.encryption import decrypt_api_key, encrypt_api_key
from crm_rag.boundary.embeddings.feature_gate import AIFeatureGate
from crm_rag.boundary.embeddings.provider import (
    EmbeddingProvider,
    SettingsEmbeddingProvider,
)

__all__ = [
    "AI_SETTING_KEYS",
    "AIFeatureGate",
    "EmbeddingConfig",
    "EmbeddingProvider",
    "QueryEmbedder",
    "SettingsEmbeddingProvider",
    "create_query_embedder",
    "decrypt_api_key",
    "encrypt_api_key",
    "is_embedding_capable",
    "parse_ai_features",
    "resolve_embedding_config",
]
