"""
Retrieval request and result models.

Dependencies: pydantic
System role: Typed inputs and outputs of RetrievalService
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Base model serializing to the camelCase shape the CRM frontend uses."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ScoredChunk(_CamelModel):
    """A chunk that cleared the similarity threshold for one query."""

    chunk_id: str = Field(description="Chunk identifier")
    document_id: str = Field(description="Owning document identifier")
    content: str = Field(description="Chunk text content")
    chunk_index: int = Field(description="Position of the chunk within its document")
    score: float = Field(description="Cosine similarity to the query (-1.0 to 1.0)")


class RagSource(_CamelModel):
    """A ranked chunk enriched with its document's display name."""

    document_id: str
    document_name: str
    chunk_content: str
    chunk_index: int
    score: float


class RagResult(_CamelModel):
    """Formatted prompt context plus the ordered sources it was built from."""

    context: str = ""
    sources: list[RagSource] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when no chunk cleared the similarity threshold."""
        return not self.sources


class RagQueryOptions(_CamelModel):
    """
    Options for RetrievalService.rag_query.

    document_ids takes precedence over customer_id. Unset top_k, min_score
    and timeout_seconds fall back to RetrievalSettings.
    """

    document_ids: list[str] | None = None
    customer_id: str | None = None
    top_k: int | None = Field(default=None, ge=1)
    min_score: float | None = Field(default=None, ge=-1.0, le=1.0)
    timeout_seconds: float | None = Field(default=None, gt=0)


@dataclass(frozen=True)
class QueryEmbedding:
    """Embedding of a query text plus the model that produced it."""

    vector: list[float]
    model: str
    dimensions: int
