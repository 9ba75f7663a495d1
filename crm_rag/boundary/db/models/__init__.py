"""ORM models for documents, document chunks and per-tenant settings."""

from crm_rag.boundary.db.models.document_model import DocumentModel
from crm_rag.boundary.db.models.chunk_model import DocumentChunkModel
from crm_rag.boundary.db.models.system_setting_model import SystemSettingModel

__all__ = ["DocumentModel", "DocumentChunkModel", "SystemSettingModel"]
