"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, StringIdMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - DocumentModel, DocumentChunkModel, SystemSettingModel: Persisted entities
  - document_crud, document_chunk_crud, system_setting_crud: CRUD operation singletons

Dependencies: sqlalchemy, crm_rag.configs
System role: Database adapter for the chunk store, document catalog and tenant settings
"""

from crm_rag.boundary.db.base import Base, StringIdMixin, TimestampMixin
from crm_rag.boundary.db.connection import (
    get_async_engine,
    get_async_session_factory,
)
from crm_rag.boundary.db.models import (
    DocumentChunkModel,
    DocumentModel,
    SystemSettingModel,
)
from crm_rag.boundary.db.CRUD import (
    BaseCRUD,
    DocumentChunkCRUD,
    DocumentCRUD,
    SystemSettingCRUD,
    document_chunk_crud,
    document_crud,
    system_setting_crud,
)

__all__ = [
    # Base classes
    "Base",
    "StringIdMixin",
    "TimestampMixin",
    # Connection
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentModel",
    "DocumentChunkModel",
    "SystemSettingModel",
    # CRUD classes
    "BaseCRUD",
    "DocumentCRUD",
    "DocumentChunkCRUD",
    "SystemSettingCRUD",
    # CRUD singletons
    "document_crud",
    "document_chunk_crud",
    "system_setting_crud",
]
