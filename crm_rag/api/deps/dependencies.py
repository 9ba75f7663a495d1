"""
Dependency injection container.

Factory functions for FastAPI dependencies. The RetrievalService and the
AI feature gate are built once in the application lifespan and stored on
app.state.

Dependencies: fastapi, crm_rag.application, crm_rag.boundary.embeddings
System role: DI container for service injection
"""

from fastapi import Request

from crm_rag.application.services.retrieval_service import RetrievalService
from crm_rag.boundary.embeddings.feature_gate import AIFeatureGate


def get_retrieval_service(request: Request) -> RetrievalService:
    """
    FastAPI dependency returning the process-wide RetrievalService.

    Args:
        request: Incoming request, used to reach app.state

    Returns:
        RetrievalService: Service created during application startup

    Raises:
        RuntimeError: If the application lifespan has not run
    """
    service = getattr(request.app.state, "retrieval_service", None)
    if service is None:
        raise RuntimeError("RetrievalService not initialized; application lifespan has not run")
    return service


def get_ai_feature_gate(request: Request) -> AIFeatureGate:
    """FastAPI dependency returning the process-wide AIFeatureGate."""
    gate = getattr(request.app.state, "ai_feature_gate", None)
    if gate is None:
        raise RuntimeError("AIFeatureGate not initialized; application lifespan has not run")
    return gate
