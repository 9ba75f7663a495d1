"""
Per-tenant AI feature switches.

A tenant can use an AI feature only when it has an AI provider configured
(with an API key, unless the provider is keyless) and has not switched the
feature off in its ai_features setting.

Dependencies: sqlalchemy, crm_rag.boundary.db
System role: Feature gate in front of the document search endpoint
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from crm_rag.boundary.db.CRUD.system_setting_crud import system_setting_crud
from crm_rag.boundary.embeddings.config import (
    AI_FEATURE_LABELS,
    AI_SETTING_KEYS,
    KEYLESS_PROVIDERS,
    parse_ai_features,
)
from crm_rag.core.exceptions import AIFeatureDisabledError, AINotConfiguredError, ChunkStoreError

logger = logging.getLogger(__name__)

GATE_SETTING_KEYS = (AI_SETTING_KEYS.PROVIDER, AI_SETTING_KEYS.API_KEY, AI_SETTING_KEYS.FEATURES)


class AIFeatureGate:
    """
    Checks a tenant's AI feature switches before a feature is used.

    Usage:
        gate = AIFeatureGate(session_factory)
        await gate.require(org_id, "rag")
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def get_features(self, organization_id: str) -> dict[str, bool] | None:
        """
        Read a tenant's feature switches.

        Args:
            organization_id: Tenant scope

        Returns:
            dict[str, bool] | None: Switches merged over the defaults, or None
            when the tenant has no usable AI provider

        Raises:
            ChunkStoreError: If the settings cannot be read
        """
        try:
            async with self._session_factory() as session:
                values = await system_setting_crud.get_values(
                    session, organization_id, GATE_SETTING_KEYS
                )
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:get_features - Settings query failed: {type(e).__name__}: {e}",
                extra={"organization_id": organization_id},
            )
            raise ChunkStoreError(
                "Failed to read AI feature settings", organization_id=organization_id
            ) from e

        provider = values.get(AI_SETTING_KEYS.PROVIDER)
        if not provider:
            return None
        if provider not in KEYLESS_PROVIDERS and not values.get(AI_SETTING_KEYS.API_KEY):
            return None

        return parse_ai_features(values.get(AI_SETTING_KEYS.FEATURES))

    async def is_enabled(self, organization_id: str, feature: str) -> bool:
        """Check a feature without raising for a disabled or unconfigured tenant."""
        features = await self.get_features(organization_id)
        return bool(features and features.get(feature, False))

    async def require(self, organization_id: str, feature: str) -> None:
        """
        Ensure a feature may be used by a tenant.

        Raises:
            AINotConfiguredError: If the tenant has no usable AI provider
            AIFeatureDisabledError: If the feature is switched off
            ChunkStoreError: If the settings cannot be read
        """
        features = await self.get_features(organization_id)
        if features is None:
            raise AINotConfiguredError(organization_id)

        if not features.get(feature, False):
            logger.info(
                f"{__name__}:require - Feature disabled",
                extra={"organization_id": organization_id, "feature": feature},
            )
            raise AIFeatureDisabledError(
                feature,
                AI_FEATURE_LABELS.get(feature, feature),
                organization_id=organization_id,
            )
