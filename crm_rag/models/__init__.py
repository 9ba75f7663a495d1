"""Value types exchanged between retrieval components."""

from crm_rag.models.chunk import Chunk, ChunkLoadResult
from crm_rag.models.retrieval import (
    QueryEmbedding,
    RagQueryOptions,
    RagResult,
    RagSource,
    ScoredChunk,
)

__all__ = [
    "Chunk",
    "ChunkLoadResult",
    "QueryEmbedding",
    "RagQueryOptions",
    "RagResult",
    "RagSource",
    "ScoredChunk",
]
