"""Application services."""

from crm_rag.application.services.retrieval_service import (
    RetrievalService,
    build_retrieval_service,
)

__all__ = ["RetrievalService", "build_retrieval_service"]
