"""
Per-tenant embedding configuration.

A tenant may name a dedicated embedding provider; otherwise its main AI
provider is used. Only providers with an embedding API qualify, and every
provider except Ollama needs an API key. The same settings carry the
tenant's AI feature switches.

Dependencies: crm_rag.core.exceptions
System role: Embedding capability rules
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping

from crm_rag.core.exceptions import ApiKeyDecryptionError

logger = logging.getLogger(__name__)


class AI_SETTING_KEYS:
    """system_settings keys holding a tenant's AI configuration."""

    PROVIDER = "ai_provider"
    API_KEY = "ai_api_key"
    OLLAMA_ENDPOINT = "ai_ollama_endpoint"
    EMBEDDING_PROVIDER = "ai_embedding_provider"
    EMBEDDING_MODEL = "ai_embedding_model"
    FEATURES = "ai_features"

    ALL = (PROVIDER, API_KEY, OLLAMA_ENDPOINT, EMBEDDING_PROVIDER, EMBEDDING_MODEL)


DEFAULT_EMBEDDING_MODELS: dict[str, str] = {
    "openai": "text-embedding-3-small",
    "google": "text-embedding-004",
    "ollama": "nomic-embed-text",
}

EMBEDDING_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-004": 768,
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
}

DEFAULT_DIMENSIONS = 768

# Anthropic has no embedding API
EMBEDDING_CAPABLE_PROVIDERS = frozenset({"openai", "google", "ollama"})

KEYLESS_PROVIDERS = frozenset({"ollama"})

# RAG stays off until a tenant opts in
DEFAULT_AI_FEATURES: dict[str, bool] = {
    "chat": True,
    "document_analysis": True,
    "email_draft": True,
    "insights": True,
    "rag": False,
}

AI_FEATURE_LABELS: dict[str, str] = {
    "chat": "AI 對話助手",
    "document_analysis": "文件智能分析",
    "email_draft": "Email 草稿生成",
    "insights": "銷售洞察",
    "rag": "RAG 文件檢索",
}


@dataclass(frozen=True)
class EmbeddingConfig:
    """Resolved embedding configuration of one tenant."""

    provider: str
    model: str
    api_key: str | None = field(repr=False)
    dimensions: int
    endpoint: str | None = None


def is_embedding_capable(provider: str) -> bool:
    """Check if a provider supports embedding generation."""
    return provider in EMBEDDING_CAPABLE_PROVIDERS


def resolve_embedding_config(
    values: Mapping[str, str | None],
    decrypt: Callable[[str], str] | None = None,
) -> EmbeddingConfig | None:
    """
    Resolve a tenant's embedding configuration from its settings.

    Args:
        values: Tenant settings keyed by AI_SETTING_KEYS
        decrypt: Turns the stored API key into plaintext; the stored value
            is used as is when omitted

    Returns:
        EmbeddingConfig | None: Config, or None when embedding is not
        configured or the stored key does not decrypt
    """
    provider = values.get(AI_SETTING_KEYS.EMBEDDING_PROVIDER) or values.get(AI_SETTING_KEYS.PROVIDER)
    if not provider or not is_embedding_capable(provider):
        return None

    model = values.get(AI_SETTING_KEYS.EMBEDDING_MODEL) or DEFAULT_EMBEDDING_MODELS.get(provider)
    if not model:
        return None

    api_key = None
    if provider not in KEYLESS_PROVIDERS:
        api_key = values.get(AI_SETTING_KEYS.API_KEY)
        if not api_key:
            return None
        if decrypt is not None:
            try:
                api_key = decrypt(api_key)
            except ApiKeyDecryptionError as e:
                logger.warning(
                    f"{__name__}:resolve_embedding_config - API key unusable: {e.message}",
                    extra={"provider": provider},
                )
                return None

    return EmbeddingConfig(
        provider=provider,
        model=model,
        api_key=api_key,
        dimensions=EMBEDDING_DIMENSIONS.get(model, DEFAULT_DIMENSIONS),
        endpoint=values.get(AI_SETTING_KEYS.OLLAMA_ENDPOINT) if provider == "ollama" else None,
    )


def parse_ai_features(raw: str | None) -> dict[str, bool]:
    """
    Merge a tenant's ai_features JSON over the default feature switches.

    Invalid JSON, or JSON that is not an object, leaves the defaults in place.
    """
    features = dict(DEFAULT_AI_FEATURES)
    if not raw:
        return features

    try:
        overrides = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"{__name__}:parse_ai_features - Ignoring invalid ai_features JSON")
        return features

    if isinstance(overrides, dict):
        features.update({str(k): bool(v) for k, v in overrides.items()})
    return features
