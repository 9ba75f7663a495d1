"""CRUD classes and singletons for the retrieval engine's tables."""

from crm_rag.boundary.db.CRUD.base_crud import BaseCRUD
from crm_rag.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from crm_rag.boundary.db.CRUD.chunk_crud import DocumentChunkCRUD, document_chunk_crud
from crm_rag.boundary.db.CRUD.system_setting_crud import (
    SystemSettingCRUD,
    system_setting_crud,
)

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "DocumentChunkCRUD",
    "SystemSettingCRUD",
    "document_crud",
    "document_chunk_crud",
    "system_setting_crud",
]
