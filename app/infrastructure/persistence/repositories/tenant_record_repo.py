"""Bulk tenant-scoped operations over every record type the deletion sequence removes."""

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import TenantRecordType
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models import (
    ApprovalHistory,
    Asset,
    AuditLog,
    Building,
    Document,
    DocumentComment,
    EmailNotification,
    Floor,
    Notification,
    Organization,
    Site,
    TenantSetting,
    User,
    Vendor,
)
from app.infrastructure.persistence.repositories.base import execute

RECORD_MODELS: dict[TenantRecordType, type[Base]] = {
    TenantRecordType.DOCUMENT_COMMENTS: DocumentComment,
    TenantRecordType.APPROVAL_HISTORY: ApprovalHistory,
    TenantRecordType.DOCUMENTS: Document,
    TenantRecordType.ASSETS: Asset,
    TenantRecordType.FLOORS: Floor,
    TenantRecordType.BUILDINGS: Building,
    TenantRecordType.SITES: Site,
    TenantRecordType.ORGANIZATIONS: Organization,
    TenantRecordType.VENDORS: Vendor,
    TenantRecordType.EMAIL_NOTIFICATIONS: EmailNotification,
    TenantRecordType.NOTIFICATIONS: Notification,
    TenantRecordType.SETTINGS: TenantSetting,
    TenantRecordType.USERS: User,
    TenantRecordType.AUDIT_LOGS: AuditLog,
}


class TenantRecordRepository:
    """delete_by_tenant/count_by_tenant keyed by TenantRecordType.

    Deletes are bulk DELETE statements (no ORM instances are loaded), so the
    audit log's per-instance delete guard does not apply to the tenant purge.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _model(self, record_type: TenantRecordType) -> Any:
        return RECORD_MODELS[record_type]

    async def delete_by_tenant(
        self, record_type: TenantRecordType, tenant_id: str
    ) -> int:
        model = self._model(record_type)
        result = await execute(
            self.db,
            delete(model)
            .where(model.tenant_id == tenant_id)
            .execution_options(synchronize_session=False),
            f"delete {record_type.value}",
        )
        return int(result.rowcount or 0)

    async def count_by_tenant(
        self, record_type: TenantRecordType, tenant_id: str
    ) -> int:
        model = self._model(record_type)
        result = await execute(
            self.db,
            select(func.count()).select_from(model).where(model.tenant_id == tenant_id),
            f"count {record_type.value}",
        )
        return int(result.scalar_one())

    async def total_document_bytes(self, tenant_id: str) -> int:
        result = await execute(
            self.db,
            select(func.coalesce(func.sum(Document.file_size), 0)).where(
                Document.tenant_id == tenant_id
            ),
            "sum documents file_size",
        )
        return int(result.scalar_one())
