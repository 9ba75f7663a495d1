"""
Document CRUD operations.

Document catalog queries used by retrieval: customer expansion and batched
display-name lookup. Every query is scoped to one organization.

Dependencies: sqlalchemy, crm_rag.boundary.db.models.document_model
System role: Document catalog read operations
"""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_rag.boundary.db.models.document_model import DocumentModel
from crm_rag.boundary.db.CRUD.base_crud import BaseCRUD


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with tenant-scoped catalog lookups.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_ids_by_customer(
        self,
        session: AsyncSession,
        organization_id: str,
        customer_id: str,
    ) -> list[str]:
        """
        Retrieve the ids of all documents attached to a customer.

        Args:
            session: Async database session
            organization_id: Tenant scope
            customer_id: Customer whose documents are wanted

        Returns:
            list[str]: Document ids (empty when the customer has none)
        """
        stmt = select(DocumentModel.id).where(
            DocumentModel.organization_id == organization_id,
            DocumentModel.customer_id == customer_id,
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_names_by_ids(
        self,
        session: AsyncSession,
        organization_id: str,
        document_ids: Iterable[str],
    ) -> dict[str, str]:
        """
        Resolve display names for a batch of document ids in one query.

        Args:
            session: Async database session
            organization_id: Tenant scope
            document_ids: Document ids to resolve

        Returns:
            dict[str, str]: Mapping of id to name for the ids that exist
        """
        ids = list(document_ids)
        if not ids:
            return {}

        stmt = select(DocumentModel.id, DocumentModel.name).where(
            DocumentModel.organization_id == organization_id,
            DocumentModel.id.in_(ids),
        )
        result = await session.execute(stmt)
        return {row.id: row.name for row in result.all()}


document_crud = DocumentCRUD()
