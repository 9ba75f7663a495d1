"""
Document chunk CRUD operations.

Raw chunk-row access for the ChunkLoader. Rows come back unparsed; embedding
deserialization and validation happen in crm_rag.core.chunk_loader.

Dependencies: sqlalchemy, crm_rag.boundary.db.models.chunk_model
System role: Chunk store read operations
"""

from typing import Iterable, Sequence

from sqlalchemy import Row, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_rag.boundary.db.models.chunk_model import DocumentChunkModel
from crm_rag.boundary.db.CRUD.base_crud import BaseCRUD


class DocumentChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """
    CRUD operations for DocumentChunkModel.

    Extends BaseCRUD with the tenant-scoped embedded-chunk scan.
    """

    def __init__(self) -> None:
        """Initialize DocumentChunkCRUD with DocumentChunkModel."""
        super().__init__(DocumentChunkModel)

    async def get_embedded_chunks(
        self,
        session: AsyncSession,
        organization_id: str,
        document_ids: Iterable[str] | None = None,
    ) -> Sequence[Row]:
        """
        Retrieve every chunk row of a tenant that carries an embedding.

        Rows are returned in (document_id, chunk_index, id) order so the scan
        order is the same on every call.

        Args:
            session: Async database session
            organization_id: Tenant scope
            document_ids: Optional restriction to these documents; an empty
                collection matches nothing

        Returns:
            Sequence of rows with id, document_id, content, chunk_index,
            embedding, embedding_model and embedding_dimensions
        """
        stmt = select(
            DocumentChunkModel.id,
            DocumentChunkModel.document_id,
            DocumentChunkModel.content,
            DocumentChunkModel.chunk_index,
            DocumentChunkModel.embedding,
            DocumentChunkModel.embedding_model,
            DocumentChunkModel.embedding_dimensions,
        ).where(
            DocumentChunkModel.organization_id == organization_id,
            DocumentChunkModel.embedding.is_not(None),
        )

        if document_ids is not None:
            ids = list(document_ids)
            if not ids:
                return []
            stmt = stmt.where(DocumentChunkModel.document_id.in_(ids))

        stmt = stmt.order_by(
            DocumentChunkModel.document_id,
            DocumentChunkModel.chunk_index,
            DocumentChunkModel.id,
        )
        result = await session.execute(stmt)
        return result.all()


document_chunk_crud = DocumentChunkCRUD()
