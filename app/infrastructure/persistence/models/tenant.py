"""Tenant ORM model. Root entity for multi-tenant hierarchy (no tenant_id)."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import BucketStatus, TenantStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


def _in_check(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class Tenant(CuidMixin, TimestampMixin, Base):
    """Root tenant entity. Table: tenant. Owns the per-tenant storage bucket."""

    __tablename__ = "tenant"

    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TenantStatus.TRIAL.value, index=True
    )
    organization_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("organization.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    plan_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("plan.id", ondelete="RESTRICT"), nullable=True
    )
    is_trial: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    plan_start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    bucket_name: Mapped[str | None] = mapped_column(String(63), nullable=True)
    bucket_region: Mapped[str | None] = mapped_column(String, nullable=True)
    bucket_status: Mapped[str] = mapped_column(
        String, nullable=False, default=BucketStatus.NOT_CREATED.value
    )

    __table_args__ = (
        CheckConstraint(
            _in_check("status", TenantStatus.values()), name="tenant_status_check"
        ),
        CheckConstraint(
            _in_check("bucket_status", BucketStatus.values()),
            name="tenant_bucket_status_check",
        ),
    )
