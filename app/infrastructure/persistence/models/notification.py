"""In-app and outbound email notification ORM models."""

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TenantScopedModel


class Notification(TenantScopedModel, Base):
    """In-app notification for one user. Table: notification."""

    __tablename__ = "notification"

    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    user_email: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str | None] = mapped_column(String, nullable=True)
    priority: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'normal'")
    )
    document_id: Mapped[str | None] = mapped_column(String, nullable=True)
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )


class EmailNotification(TenantScopedModel, Base):
    """Queued or sent email. Table: email_notification."""

    __tablename__ = "email_notification"

    template: Mapped[str] = mapped_column(String, nullable=False)
    to: Mapped[str] = mapped_column(String, nullable=False)
    subject: Mapped[str] = mapped_column(String, nullable=False)
    variables: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    document_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'pending'")
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    retry_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
