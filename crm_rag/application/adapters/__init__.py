"""Application adapters over the database boundary."""

from crm_rag.application.adapters.document_catalog_adapter import DocumentCatalog

__all__ = ["DocumentCatalog"]
