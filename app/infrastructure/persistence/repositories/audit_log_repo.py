"""Audit log repository. Append-only; implements IAuditLogRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.repositories.base import execute, persist
from app.shared.utils.generators import generate_cuid


def _orm_to_result(row: AuditLog) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        tenant_id=row.tenant_id,
        action=row.action,
        resource_type=row.resource_type,
        resource_id=row.resource_id,
        actor_id=row.actor_id,
        actor_email=row.actor_email,
        details=row.details or {},
        timestamp=row.timestamp,
    )


class AuditLogRepository:
    """Append-only audit log repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""
        row = AuditLog(
            id=generate_cuid(),
            tenant_id=entry.tenant_id,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            actor_id=entry.actor_id,
            actor_email=entry.actor_email,
            details=dict(entry.details),
        )
        return _orm_to_result(await persist(self.db, row, "create audit_log"))

    async def list_for_tenant(
        self, tenant_id: str, *, limit: int = 100
    ) -> list[AuditLogResult]:
        """Entries for tenant, newest first."""
        result = await execute(
            self.db,
            select(AuditLog)
            .where(AuditLog.tenant_id == tenant_id)
            .order_by(AuditLog.timestamp.desc())
            .limit(limit),
            "list audit_log",
        )
        return [_orm_to_result(r) for r in result.scalars().all()]
