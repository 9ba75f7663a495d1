"""
Chunk loading from the relational chunk store.

Fetches a tenant's embedded chunk rows, deserializes each stored vector and
drops rows that cannot be trusted in scoring. A bad row is logged and
skipped; it never fails the whole load.

Dependencies: sqlalchemy, numpy, crm_rag.boundary.db
System role: ChunkLoader
"""

import json
import logging
from typing import Any, Iterable

import numpy as np
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from crm_rag.boundary.db.CRUD.chunk_crud import document_chunk_crud
from crm_rag.core.exceptions import ChunkStoreError
from crm_rag.models.chunk import Chunk, ChunkLoadResult

logger = logging.getLogger(__name__)


class EmbeddingParseError(ValueError):
    """Stored embedding is not a usable vector."""


def parse_embedding(raw: str, declared_dimensions: int | None) -> np.ndarray:
    """
    Deserialize a stored embedding and check it against its declared length.

    Args:
        raw: JSON array text as written by the ingestion pipeline
        declared_dimensions: Dimensionality recorded alongside the vector

    Returns:
        np.ndarray: Read-only float64 vector

    Raises:
        EmbeddingParseError: If the text is not a flat array of finite
            numbers of exactly the declared length
    """
    if declared_dimensions is None or declared_dimensions <= 0:
        raise EmbeddingParseError("missing declared dimensionality")

    try:
        values = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise EmbeddingParseError(f"invalid JSON: {e}") from e

    if not isinstance(values, list):
        raise EmbeddingParseError(f"expected JSON array, got {type(values).__name__}")
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in values):
        raise EmbeddingParseError("array contains non-numeric values")

    try:
        vector = np.asarray(values, dtype=np.float64)
    except OverflowError as e:
        raise EmbeddingParseError("array contains out-of-range values") from e
    if not np.all(np.isfinite(vector)):
        raise EmbeddingParseError("array contains non-finite values")
    if vector.shape[0] != declared_dimensions:
        raise EmbeddingParseError(
            f"length {vector.shape[0]} does not match declared {declared_dimensions}"
        )

    vector.flags.writeable = False
    return vector


class ChunkLoader:
    """
    Loads embedded chunks for one tenant.

    Each call opens its own session from the injected factory, so the loader
    can be shared by concurrent queries.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize loader.

        Args:
            session_factory: Async session factory bound to the chunk store
        """
        self._session_factory = session_factory

    async def load(
        self,
        organization_id: str,
        document_ids: Iterable[str] | None = None,
    ) -> ChunkLoadResult:
        """
        Load a tenant's embedded chunks.

        Args:
            organization_id: Tenant scope
            document_ids: Optional document filter; an empty collection
                yields no chunks

        Returns:
            ChunkLoadResult: Parsed chunks, cacheable only when unfiltered

        Raises:
            ChunkStoreError: If the store query fails
        """
        id_filter = None if document_ids is None else list(dict.fromkeys(document_ids))

        try:
            async with self._session_factory() as session:
                rows = await document_chunk_crud.get_embedded_chunks(
                    session, organization_id, id_filter
                )
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:load - Chunk store query failed: {type(e).__name__}: {e}",
                extra={"organization_id": organization_id},
            )
            raise ChunkStoreError(
                "Failed to load document chunks", organization_id=organization_id
            ) from e

        chunks = tuple(
            chunk for chunk in (self._to_chunk(row, organization_id) for row in rows)
            if chunk is not None
        )

        dropped = len(rows) - len(chunks)
        logger.info(
            f"{__name__}:load - Loaded {len(chunks)} chunks "
            f"(dropped={dropped}, filtered={id_filter is not None})",
            extra={"organization_id": organization_id},
        )
        return ChunkLoadResult(chunks=chunks, cacheable=id_filter is None)

    @staticmethod
    def _to_chunk(row: Any, organization_id: str) -> Chunk | None:
        """Convert one store row to a Chunk, or None if its embedding is unusable."""
        if row.embedding is None:
            return None

        try:
            vector = parse_embedding(row.embedding, row.embedding_dimensions)
        except EmbeddingParseError as e:
            logger.warning(
                f"{__name__}:load - Skipping chunk with unusable embedding: {e}",
                extra={"organization_id": organization_id, "chunk_id": row.id},
            )
            return None

        return Chunk(
            chunk_id=row.id,
            document_id=row.document_id,
            content=row.content,
            chunk_index=row.chunk_index,
            embedding=vector,
            embedding_model=row.embedding_model,
        )
