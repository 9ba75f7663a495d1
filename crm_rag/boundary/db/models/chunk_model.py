"""
Document chunk ORM model.

A text fragment of a document plus its serialized embedding. Rows are
written by the ingestion pipeline; the retrieval engine reads them.

Dependencies: sqlalchemy, crm_rag.boundary.db.base
System role: Chunk store persistence
"""

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_rag.boundary.db.base import Base, StringIdMixin, TimestampMixin


class DocumentChunkModel(Base, StringIdMixin, TimestampMixin):
    """
    Document chunk ORM model.

    Attributes:
        id: String primary key (the chunk id)
        organization_id: Owning tenant
        document_id: Foreign key to DocumentModel (cascade delete)
        content: Chunk text
        chunk_index: Ordinal position of the chunk within its document
        embedding: JSON array of floats, null until the chunk is embedded
        embedding_model: Model id that produced the embedding
        embedding_dimensions: Declared length of the embedding vector

    Constraints:
        document_id: Foreign key ON DELETE CASCADE to documents.id
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        Index("ix_document_chunks_org_document", "organization_id", "document_id"),
    )

    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)

    document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    embedding: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Serialized JSON array of floats",
    )

    embedding_model: Mapped[str | None] = mapped_column(String(128), nullable=True)

    embedding_dimensions: Mapped[int | None] = mapped_column(Integer, nullable=True)

    document = relationship("DocumentModel", back_populates="chunks")
