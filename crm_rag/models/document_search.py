"""
Document search API schemas.

Request/response contracts of the document search and embedding cache
endpoints. Field names are camelCase on the wire.

Dependencies: pydantic
System role: Document search API contracts
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentSearchRequest(_ApiModel):
    """Request schema for semantic document search."""

    organization_id: str = Field(min_length=1, description="Tenant to search")
    query: str = Field(min_length=1, description="Free-text search query")
    customer_id: str | None = Field(default=None, description="Restrict to a customer's documents")
    document_ids: list[str] | None = Field(default=None, description="Restrict to these documents")
    top_k: int | None = Field(default=None, ge=1, le=50, description="Maximum number of results")
    min_score: float | None = Field(
        default=None, ge=-1.0, le=1.0, description="Minimum cosine similarity"
    )


class DocumentSearchResult(_ApiModel):
    """One matching chunk."""

    document_id: str
    document_name: str
    content: str
    chunk_index: int
    score: float = Field(description="Similarity rounded to two decimals")


class DocumentSearchResponse(_ApiModel):
    """Response schema for semantic document search."""

    query: str
    results: list[DocumentSearchResult]
    total_results: int


class InvalidateEmbeddingsRequest(_ApiModel):
    """Request schema for dropping a tenant's cached embeddings."""

    organization_id: str = Field(min_length=1)


class InvalidateEmbeddingsResponse(_ApiModel):
    """Acknowledgement of a cache invalidation."""

    organization_id: str
    invalidated: bool = True
