"""
System setting CRUD operations.

Dependencies: sqlalchemy, crm_rag.boundary.db.models.system_setting_model
System role: Tenant configuration read operations
"""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_rag.boundary.db.models.system_setting_model import SystemSettingModel
from crm_rag.boundary.db.CRUD.base_crud import BaseCRUD


class SystemSettingCRUD(BaseCRUD[SystemSettingModel]):
    """CRUD operations for SystemSettingModel."""

    def __init__(self) -> None:
        """Initialize SystemSettingCRUD with SystemSettingModel."""
        super().__init__(SystemSettingModel)

    async def get_values(
        self,
        session: AsyncSession,
        organization_id: str,
        keys: Iterable[str],
    ) -> dict[str, str | None]:
        """
        Read several setting values for a tenant in one query.

        Args:
            session: Async database session
            organization_id: Tenant scope
            keys: Setting keys to read

        Returns:
            dict[str, str | None]: Values keyed by setting key; absent keys are omitted
        """
        stmt = select(SystemSettingModel.key, SystemSettingModel.value).where(
            SystemSettingModel.organization_id == organization_id,
            SystemSettingModel.key.in_(list(keys)),
        )
        result = await session.execute(stmt)
        return {row.key: row.value for row in result.all()}


system_setting_crud = SystemSettingCRUD()
