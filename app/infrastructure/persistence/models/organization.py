"""Organization ORM model. The customer a tenant is provisioned for."""

from sqlalchemy import Boolean, ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Organization(CuidMixin, TimestampMixin, Base):
    """Organization. Table: organization. Name is unique across the platform.

    tenant_id is null until provisioning attaches the tenant; the deletion
    sequence removes organizations by it. The FK is created after both tables
    exist (tenant.organization_id points back here).
    """

    __tablename__ = "organization"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey(
            "tenant.id",
            ondelete="CASCADE",
            use_alter=True,
            name="fk_organization_tenant_id",
        ),
        nullable=True,
        index=True,
    )
