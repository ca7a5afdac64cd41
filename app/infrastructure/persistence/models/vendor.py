"""Vendor ORM model (contractors and suppliers)."""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class Vendor(TenantScopedModel, Base):
    """Vendor. Table: vendor."""

    __tablename__ = "vendor"

    contractor_name: Mapped[str] = mapped_column(String, nullable=False)
    trading_name: Mapped[str | None] = mapped_column(String, nullable=True)
    abn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    contractor_type: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
