"""
Exception hierarchy for the CRM retrieval engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Recoverable conditions (missing embedding config, provider failure, corrupt
chunk rows, empty scope) never leave RetrievalService as exceptions; only the
infrastructure failures below propagate to callers.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CrmRagException(Exception):
    """Base exception for all retrieval engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(CrmRagException):
    """Raised when query options fail validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class EmbeddingProviderError(CrmRagException):
    """Raised when the embedding provider call fails."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        organization_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize embedding provider error.

        Args:
            message: Error message
            provider: Provider name (openai, google, ollama)
            organization_id: Tenant whose configuration was used
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        if organization_id:
            details["organization_id"] = organization_id
        super().__init__(message, details)


class ChunkStoreError(CrmRagException):
    """Raised when the chunk store cannot be read."""

    def __init__(
        self,
        message: str,
        organization_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if organization_id:
            details["organization_id"] = organization_id
        super().__init__(message, details)


class DocumentCatalogError(CrmRagException):
    """Raised when document names or customer documents cannot be resolved."""

    pass


class RetrievalTimeoutError(CrmRagException):
    """Raised when a caller-supplied deadline expires during a query."""

    def __init__(
        self,
        stage: str,
        timeout_seconds: float,
        organization_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retrieval timeout error.

        Args:
            stage: Query stage that exceeded the deadline
                (embedding, chunk_load, document_catalog)
            timeout_seconds: Deadline that was exceeded
            organization_id: Tenant being queried
            details: Additional context
        """
        details = details or {}
        details["stage"] = stage
        details["timeout_seconds"] = timeout_seconds
        if organization_id:
            details["organization_id"] = organization_id
        self.stage = stage
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Retrieval timed out during {stage}", details)


class ApiKeyDecryptionError(CrmRagException):
    """Raised when a stored provider API key cannot be decrypted."""

    pass


class AINotConfiguredError(CrmRagException):
    """Raised when a tenant has no AI provider or API key configured."""

    def __init__(self, organization_id: str | None = None) -> None:
        details = {"organization_id": organization_id} if organization_id else None
        super().__init__("AI 尚未設定。請到設定頁面配置 AI 供應商和 API 金鑰。", details)


class AIFeatureDisabledError(CrmRagException):
    """Raised when a tenant has switched off the AI feature being used."""

    def __init__(
        self,
        feature: str,
        label: str,
        organization_id: str | None = None,
    ) -> None:
        """
        Initialize feature disabled error.

        Args:
            feature: Feature key (chat, rag, ...)
            label: Display name shown to the user
            organization_id: Tenant whose settings disabled it
        """
        details = {"feature": feature}
        if organization_id:
            details["organization_id"] = organization_id
        self.feature = feature
        super().__init__(f"AI 功能「{label}」已停用。請聯繫管理員啟用此功能。", details)
