"""API-specific dependencies."""

from .dependencies import get_ai_feature_gate, get_retrieval_service

__all__ = ["get_ai_feature_gate", "get_retrieval_service"]
