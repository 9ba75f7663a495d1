"""
System setting ORM model.

Per-tenant key/value configuration. The retrieval engine reads the AI
provider keys to decide whether and how a tenant can embed queries.

Dependencies: sqlalchemy, crm_rag.boundary.db.base
System role: Tenant configuration persistence
"""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from crm_rag.boundary.db.base import Base, StringIdMixin, TimestampMixin


class SystemSettingModel(Base, StringIdMixin, TimestampMixin):
    """
    System setting ORM model.

    Attributes:
        organization_id: Owning tenant
        key: Setting key (e.g. ai_embedding_provider)
        value: Setting value, null when cleared
    """

    __tablename__ = "system_settings"
    __table_args__ = (
        UniqueConstraint("organization_id", "key", name="uq_system_settings_org_key"),
    )

    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)

    key: Mapped[str] = mapped_column(String(128), nullable=False)

    value: Mapped[str | None] = mapped_column(Text, nullable=True)
