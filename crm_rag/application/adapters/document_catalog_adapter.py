"""
Document catalog adapter.

Resolves a customer's documents and document display names for retrieval.
Each call opens its own session so the adapter can be shared between
concurrent queries.

Dependencies: sqlalchemy, crm_rag.boundary.db.CRUD.document_crud
System role: Document catalog collaborator of RetrievalService
"""

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from crm_rag.boundary.db.CRUD.document_crud import document_crud
from crm_rag.core.exceptions import DocumentCatalogError

logger = logging.getLogger(__name__)


class DocumentCatalog:
    """Tenant-scoped document lookups."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize catalog.

        Args:
            session_factory: Async session factory bound to the document store
        """
        self._session_factory = session_factory

    async def get_customer_document_ids(
        self,
        organization_id: str,
        customer_id: str,
    ) -> list[str]:
        """
        List the documents attached to a customer.

        Args:
            organization_id: Tenant scope
            customer_id: Customer identifier

        Returns:
            list[str]: Document ids, empty when the customer has none

        Raises:
            DocumentCatalogError: If the catalog cannot be read
        """
        try:
            async with self._session_factory() as session:
                return await document_crud.get_ids_by_customer(
                    session, organization_id, customer_id
                )
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:get_customer_document_ids - Catalog query failed: {type(e).__name__}: {e}",
                extra={"organization_id": organization_id, "customer_id": customer_id},
            )
            raise DocumentCatalogError(
                "Failed to resolve customer documents",
                {"organization_id": organization_id, "customer_id": customer_id},
            ) from e

    async def get_document_names(
        self,
        organization_id: str,
        document_ids: Iterable[str],
    ) -> dict[str, str]:
        """
        Resolve display names for a batch of documents in one query.

        Args:
            organization_id: Tenant scope
            document_ids: Documents to name

        Returns:
            dict[str, str]: Names of the documents that exist

        Raises:
            DocumentCatalogError: If the catalog cannot be read
        """
        ids = list(dict.fromkeys(document_ids))
        if not ids:
            return {}

        try:
            async with self._session_factory() as session:
                return await document_crud.get_names_by_ids(session, organization_id, ids)
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:get_document_names - Catalog query failed: {type(e).__name__}: {e}",
                extra={"organization_id": organization_id},
            )
            raise DocumentCatalogError(
                "Failed to resolve document names",
                {"organization_id": organization_id, "document_count": len(ids)},
            ) from e
