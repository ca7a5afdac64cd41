"""Per-tenant settings ORM model."""

from typing import Any

from sqlalchemy import Boolean, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class TenantSetting(TenantScopedModel, Base):
    """Key/value setting. Table: tenant_setting. Unique (tenant_id, setting_key)."""

    __tablename__ = "tenant_setting"

    setting_key: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    setting_type: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    value: Mapped[Any] = mapped_column(JSONB, nullable=True)
    default_value: Mapped[Any] = mapped_column(JSONB, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    is_editable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "setting_key", name="uq_tenant_setting_key"),
    )
