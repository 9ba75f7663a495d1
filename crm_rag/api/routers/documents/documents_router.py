"""
Document search API endpoints.

Routes:
- POST /documents/search - Semantic search over a tenant's documents
- POST /documents/embeddings/invalidate - Drop a tenant's cached embeddings

Dependencies: crm_rag.application.services, crm_rag.boundary.embeddings, crm_rag.models
System role: Document search HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from crm_rag.api.deps.dependencies import get_ai_feature_gate, get_retrieval_service
from crm_rag.application.services.retrieval_service import RetrievalService
from crm_rag.boundary.embeddings.feature_gate import AIFeatureGate
from crm_rag.models.document_search import (
    DocumentSearchRequest,
    DocumentSearchResponse,
    DocumentSearchResult,
    InvalidateEmbeddingsRequest,
    InvalidateEmbeddingsResponse,
)
from crm_rag.models.retrieval import RagQueryOptions

from .retrieval_error_handling import handle_retrieval_errors

logger = logging.getLogger(__name__)

EMBEDDING_NOT_CONFIGURED = "Embedding 尚未設定。請至「設定 → AI 功能」設定 Embedding 供應商。"

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/search", response_model=DocumentSearchResponse, response_model_by_alias=True)
@handle_retrieval_errors
async def search_documents(
    request: DocumentSearchRequest,
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
    feature_gate: AIFeatureGate = Depends(get_ai_feature_gate),
) -> DocumentSearchResponse:
    """
    Semantic search over a tenant's embedded documents.

    Args:
        request: Query plus optional customer/document scope and ranking controls
        retrieval_service: Injected RetrievalService
        feature_gate: Injected AIFeatureGate

    Returns:
        DocumentSearchResponse: Ranked matches with document names

    Raises:
        HTTPException(400): AI or embedding not configured, RAG switched off,
            or invalid options
        HTTPException(503): Chunk store or catalog unavailable
        HTTPException(504): Deadline expired
    """
    await feature_gate.require(request.organization_id, "rag")

    options = RagQueryOptions(
        document_ids=request.document_ids,
        customer_id=request.customer_id,
        top_k=request.top_k,
        min_score=request.min_score,
    )
    result = await retrieval_service.rag_query(request.organization_id, request.query, options)

    if result is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=EMBEDDING_NOT_CONFIGURED)

    results = [
        DocumentSearchResult(
            document_id=source.document_id,
            document_name=source.document_name,
            content=source.chunk_content,
            chunk_index=source.chunk_index,
            score=round(source.score, 2),
        )
        for source in result.sources
    ]
    return DocumentSearchResponse(query=request.query, results=results, total_results=len(results))


@router.post(
    "/embeddings/invalidate",
    response_model=InvalidateEmbeddingsResponse,
    response_model_by_alias=True,
)
@handle_retrieval_errors
async def invalidate_embeddings(
    request: InvalidateEmbeddingsRequest,
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
) -> InvalidateEmbeddingsResponse:
    """
    Drop a tenant's cached chunk set after re-embedding or a provider/model switch.

    Args:
        request: Tenant to invalidate
        retrieval_service: Injected RetrievalService

    Returns:
        InvalidateEmbeddingsResponse: Acknowledgement
    """
    retrieval_service.invalidate_embedding_cache(request.organization_id)
    logger.info(
        "Embedding cache invalidated",
        extra={"organization_id": request.organization_id},
    )
    return InvalidateEmbeddingsResponse(organization_id=request.organization_id)
