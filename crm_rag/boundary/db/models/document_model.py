"""
Document ORM model.

Catalog entry for an uploaded CRM document. The retrieval engine only reads
it: to resolve display names and to expand a customer into document ids.

Dependencies: sqlalchemy, crm_rag.boundary.db.base
System role: Document catalog persistence
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_rag.boundary.db.base import Base, StringIdMixin, TimestampMixin


class DocumentModel(Base, StringIdMixin, TimestampMixin):
    """
    Document ORM model.

    Attributes:
        id: String primary key
        organization_id: Owning tenant
        customer_id: Customer the document is attached to (nullable)
        name: Display name shown in retrieval sources (255 char limit)
        created_at: Upload timestamp (UTC)
        updated_at: Last modification timestamp (UTC)

    Relationships:
        chunks: DocumentChunkModel rows (cascade delete)
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_org_customer", "organization_id", "customer_id"),
    )

    organization_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    customer_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Original filename",
    )

    chunks = relationship(
        "DocumentChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
    )
