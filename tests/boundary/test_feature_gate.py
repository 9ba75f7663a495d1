"""
Test suite for AIFeatureGate.

Tenant settings live in an in-memory SQLite database.

System role: Verification of per-tenant AI feature switches
"""

import json
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from crm_rag.boundary.embeddings.config import AI_SETTING_KEYS
from crm_rag.boundary.embeddings.feature_gate import AIFeatureGate
from crm_rag.core.exceptions import AIFeatureDisabledError, AINotConfiguredError, ChunkStoreError

ORG = "org-1"


class TestAIFeatureGateRequire:
    """Test suite for require()."""

    @pytest.mark.asyncio
    async def test_enabled_rag_should_pass(self, store, session_factory) -> None:
        await store.set_settings(
            ORG,
            **{
                AI_SETTING_KEYS.PROVIDER: "openai",
                AI_SETTING_KEYS.API_KEY: "stored-key",
                AI_SETTING_KEYS.FEATURES: json.dumps({"rag": True}),
            },
        )

        await AIFeatureGate(session_factory).require(ORG, "rag")

    @pytest.mark.asyncio
    async def test_rag_should_be_off_by_default(self, store, session_factory) -> None:
        """Test a configured tenant must opt in to RAG."""
        await store.set_settings(
            ORG, **{AI_SETTING_KEYS.PROVIDER: "openai", AI_SETTING_KEYS.API_KEY: "stored-key"}
        )

        with pytest.raises(AIFeatureDisabledError) as exc_info:
            await AIFeatureGate(session_factory).require(ORG, "rag")

        assert "RAG 文件檢索" in exc_info.value.message
        assert exc_info.value.details == {"feature": "rag", "organization_id": ORG}

    @pytest.mark.asyncio
    async def test_explicitly_disabled_feature_should_raise(self, store, session_factory) -> None:
        await store.set_settings(
            ORG,
            **{
                AI_SETTING_KEYS.PROVIDER: "google",
                AI_SETTING_KEYS.API_KEY: "stored-key",
                AI_SETTING_KEYS.FEATURES: json.dumps({"rag": True, "chat": False}),
            },
        )
        gate = AIFeatureGate(session_factory)

        with pytest.raises(AIFeatureDisabledError):
            await gate.require(ORG, "chat")
        await gate.require(ORG, "rag")

    @pytest.mark.asyncio
    async def test_unconfigured_tenant_should_raise_not_configured(
        self, session_factory
    ) -> None:
        with pytest.raises(AINotConfiguredError):
            await AIFeatureGate(session_factory).require(ORG, "rag")

    @pytest.mark.asyncio
    async def test_missing_api_key_should_raise_not_configured(
        self, store, session_factory
    ) -> None:
        await store.set_settings(
            ORG,
            **{
                AI_SETTING_KEYS.PROVIDER: "openai",
                AI_SETTING_KEYS.FEATURES: json.dumps({"rag": True}),
            },
        )

        with pytest.raises(AINotConfiguredError):
            await AIFeatureGate(session_factory).require(ORG, "rag")

    @pytest.mark.asyncio
    async def test_keyless_provider_should_not_need_api_key(
        self, store, session_factory
    ) -> None:
        await store.set_settings(
            ORG,
            **{
                AI_SETTING_KEYS.PROVIDER: "ollama",
                AI_SETTING_KEYS.FEATURES: json.dumps({"rag": True}),
            },
        )

        await AIFeatureGate(session_factory).require(ORG, "rag")

    @pytest.mark.asyncio
    async def test_settings_store_failure_should_raise_chunk_store_error(self) -> None:
        session = MagicMock()
        session.__aenter__.side_effect = OperationalError("SELECT", {}, Exception("down"))
        gate = AIFeatureGate(MagicMock(return_value=session))

        with pytest.raises(ChunkStoreError):
            await gate.require(ORG, "rag")


class TestAIFeatureGateIsEnabled:
    """Test suite for is_enabled()."""

    @pytest.mark.asyncio
    async def test_should_not_raise_for_unconfigured_tenant(self, session_factory) -> None:
        assert await AIFeatureGate(session_factory).is_enabled(ORG, "rag") is False

    @pytest.mark.asyncio
    async def test_should_read_default_switches(self, store, session_factory) -> None:
        await store.set_settings(
            ORG, **{AI_SETTING_KEYS.PROVIDER: "openai", AI_SETTING_KEYS.API_KEY: "stored-key"}
        )
        gate = AIFeatureGate(session_factory)

        assert await gate.is_enabled(ORG, "chat") is True
        assert await gate.is_enabled(ORG, "rag") is False
