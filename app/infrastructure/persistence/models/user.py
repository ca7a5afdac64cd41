"""User ORM model (tenant-scoped)."""

from sqlalchemy import ARRAY, Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class User(TenantScopedModel, Base):
    """User model. Table: app_user. Email is unique across tenants (login identity)."""

    __tablename__ = "app_user"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true"), index=True
    )
    role_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
    identity_provider_id: Mapped[str | None] = mapped_column(
        String, nullable=True, index=True
    )
