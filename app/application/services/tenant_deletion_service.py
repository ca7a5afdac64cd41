"""Tenant deletion: full (saga over record types plus bucket disposal) and soft.

Full deletion is forward-only, not atomic across record types: each record
type is deleted and committed in turn, and a failure stops the run without
undoing earlier deletions. Storage disposal is best-effort and never blocks
removal of the tenant row.
"""

from __future__ import annotations

import logging

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.application.dtos.storage import StorageDeletionResult
from app.application.dtos.tenant import (
    DatabaseDeletionResult,
    DeletionOptions,
    DeletionResult,
    SoftDeleteResult,
    TenantResult,
    TenantUsage,
)
from app.application.interfaces.repositories import IUnitOfWork
from app.application.interfaces.services import ITenantBucketStorage
from app.application.services.step_log import DeletionLog
from app.domain.enums import (
    TENANT_RECORD_DELETION_ORDER,
    StorageDeletionType,
    TenantStatus,
)
from app.domain.events import LifecycleEvent, LifecycleEventDispatcher
from app.domain.exceptions import (
    ActiveUsersExistException,
    DatabaseDeletionException,
    TenantNotFoundException,
)
from app.shared.enums import ActorType, AuditAction, AuditResourceType
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.bucket_naming import generate_bucket_name
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class TenantDeletionService:
    """Removes a tenant and everything it owns, or deactivates it."""

    def __init__(
        self,
        uow: IUnitOfWork,
        storage: ITenantBucketStorage,
        events: LifecycleEventDispatcher | None = None,
        *,
        bucket_prefix: str = "fulq-org",
        retention_days: int = 90,
    ) -> None:
        self.uow = uow
        self.storage = storage
        self.events = events
        self.bucket_prefix = bucket_prefix
        self.retention_days = retention_days

    @traced("tenant.delete")
    async def delete_tenant_completely(
        self, tenant_id: str, options: DeletionOptions | None = None
    ) -> DeletionResult:
        """Delete tenant rows in dependency order, dispose of the bucket, then the tenant.

        Raises:
            TenantNotFoundException: no such tenant.
            ActiveUsersExistException: active users remain and force_delete is off.
                Raised before anything is modified.
            DatabaseDeletionException: a record type failed to delete. Carries
                counts deleted so far; storage and the tenant row are untouched.
        """
        options = options or DeletionOptions()
        log = DeletionLog(tenant_id=tenant_id)
        log.log("Starting comprehensive tenant deletion")
        add_span_attributes(tenant_id=tenant_id)

        tenant = await self.uow.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        log.log("Tenant found", tenant_name=tenant.name, status=tenant.status.value)

        if not options.force_delete:
            active_users = await self.uow.users.count_active(tenant_id)
            if active_users > 0:
                raise ActiveUsersExistException(tenant_id, active_users)

        if options.create_final_audit_log:
            await self._write_audit_entry(
                tenant,
                options.actor_id,
                options.actor_email,
                {
                    "tenant_name": tenant.name,
                    "status": tenant.status.value,
                    "deletion_type": "complete",
                    "force_delete": options.force_delete,
                },
                log,
            )

        database_result = None
        if options.delete_database:
            log.log("Starting database record deletion")
            database_result = await self._delete_records(tenant_id, log)

        s3_result = None
        s3_deletion_type = None
        bucket_name = None
        if options.delete_s3:
            try:
                bucket_name = self._bucket_name_for(tenant)
            except ValueError as e:
                log.log_error("Resolving S3 bucket name failed but continuing", e)
                s3_result = StorageDeletionResult(
                    success=False, message="S3 bucket name could not be resolved", error=str(e)
                )
        if bucket_name is not None:
            if options.immediate_s3_delete:
                s3_deletion_type = StorageDeletionType.IMMEDIATE
                log.log("Starting immediate S3 bucket deletion", bucket_name=bucket_name)
                s3_result = await self._delete_bucket_now(bucket_name, log)
            else:
                s3_deletion_type = StorageDeletionType.SCHEDULED
                log.log(
                    f"Marking S3 bucket for auto-deletion after {self.retention_days} days",
                    bucket_name=bucket_name,
                )
                s3_result = await self._schedule_bucket_deletion(bucket_name, log)

        log.log("Deleting tenant record")
        await self.uow.tenants.delete_tenant(tenant_id)
        await self.uow.commit()
        log.log("Tenant deletion completed successfully")

        if self.events is not None:
            await self.events.dispatch(
                LifecycleEvent.TENANT_DELETED,
                {
                    "tenant_id": tenant_id,
                    "tenant_name": tenant.name,
                    "s3_deletion_type": s3_deletion_type.value if s3_deletion_type else None,
                },
            )

        return DeletionResult(
            success=True,
            message=self._deletion_message(s3_deletion_type),
            tenant_id=tenant_id,
            tenant_name=tenant.name,
            database=database_result,
            s3=s3_result,
            s3_deletion_type=s3_deletion_type,
            deletion_log=log.entries,
            errors=log.errors,
        )

    @traced("tenant.soft_delete")
    async def soft_delete_tenant(
        self,
        tenant_id: str,
        actor_id: str | None = None,
        actor_email: str | None = None,
    ) -> SoftDeleteResult:
        """Mark the tenant inactive; records and storage are left in place.

        Raises TenantNotFoundException when the tenant is missing, including
        when it is deleted between the read and the status update.
        """
        tenant = await self.uow.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        previous_status = tenant.status
        updated = await self.uow.tenants.update_status(tenant_id, TenantStatus.INACTIVE)
        await self.uow.commit()
        logger.info(
            "Tenant %s deactivated (previous status %s)", tenant_id, previous_status.value
        )

        audit_logged = await self._write_audit_entry(
            updated,
            actor_id,
            actor_email,
            {
                "tenant_name": tenant.name,
                "deletion_type": "soft",
                "previous_status": previous_status.value,
            },
        )
        if self.events is not None:
            await self.events.dispatch(
                LifecycleEvent.TENANT_DEACTIVATED,
                {"tenant_id": tenant_id, "previous_status": previous_status.value},
            )
        return SoftDeleteResult(
            success=True,
            message="Tenant deactivated successfully (soft delete)",
            tenant_id=tenant_id,
            tenant_name=tenant.name,
            previous_status=previous_status,
            new_status=updated.status,
            audit_logged=audit_logged,
        )

    async def get_tenant_usage(self, tenant_id: str) -> TenantUsage:
        """Row counts per record type, in deletion order."""
        tenant = await self.uow.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        counts = {}
        for record_type in TENANT_RECORD_DELETION_ORDER:
            counts[record_type.value] = await self.uow.records.count_by_tenant(
                record_type, tenant_id
            )
        return TenantUsage(tenant_id=tenant_id, tenant_name=tenant.name, counts=counts)

    def _bucket_name_for(self, tenant: TenantResult) -> str:
        return tenant.bucket_name or generate_bucket_name(
            self.bucket_prefix, tenant.name, tenant.id
        )

    def _deletion_message(self, s3_deletion_type: StorageDeletionType | None) -> str:
        if s3_deletion_type is StorageDeletionType.IMMEDIATE:
            return "Tenant and all dependencies deleted successfully"
        if s3_deletion_type is StorageDeletionType.SCHEDULED:
            return (
                "Tenant deleted successfully. S3 bucket marked for auto-deletion "
                f"after {self.retention_days} days."
            )
        return "Tenant deleted successfully. S3 bucket was not modified."

    async def _write_audit_entry(
        self,
        tenant: TenantResult,
        actor_id: str | None,
        actor_email: str | None,
        details: dict,
        log: DeletionLog | None = None,
    ) -> bool:
        """Append a delete audit entry. Failures are logged and swallowed."""
        entry = AuditLogEntryCreate(
            tenant_id=tenant.id,
            action=AuditAction.DELETE.value,
            resource_type=AuditResourceType.TENANT.value,
            resource_id=tenant.id,
            actor_id=actor_id,
            actor_email=actor_email,
            details={
                **details,
                "actor_type": (ActorType.ADMIN if actor_id else ActorType.SYSTEM).value,
                "timestamp": utc_now().isoformat(),
            },
        )
        try:
            await self.uow.audit_logs.create(entry)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            if log is not None:
                log.log_error("Failed to create final audit log", e)
            else:
                logger.exception("Audit entry for tenant %s failed (non-fatal)", tenant.id)
            return False
        if log is not None:
            log.log("Final audit log created")
        return True

    async def _delete_records(
        self, tenant_id: str, log: DeletionLog
    ) -> DatabaseDeletionResult:
        counts: dict[str, int] = {}
        for record_type in TENANT_RECORD_DELETION_ORDER:
            try:
                deleted = await self.uow.records.delete_by_tenant(record_type, tenant_id)
                await self.uow.commit()
            except Exception as e:
                await self.uow.rollback()
                log.log_error(f"Deleting {record_type.value}", e)
                raise DatabaseDeletionException(
                    tenant_id,
                    record_type.value,
                    str(e),
                    counts,
                    deletion_log=log.entries,
                ) from e
            counts[record_type.value] = deleted
            log.log(f"Deleted {record_type.value}", count=deleted)
        result = DatabaseDeletionResult(counts=counts)
        log.log("Database records deleted", total_deleted=result.total_deleted)
        return result

    async def _delete_bucket_now(
        self, bucket_name: str, log: DeletionLog
    ) -> StorageDeletionResult:
        try:
            if not await self.storage.bucket_exists(bucket_name):
                log.log("S3 bucket does not exist", bucket_name=bucket_name)
                return StorageDeletionResult(
                    success=True,
                    message="No S3 bucket to delete",
                    bucket_name=bucket_name,
                )
            objects_deleted = await self.storage.delete_bucket_and_contents(bucket_name)
        except Exception as e:
            log.log_error("S3 operation failed but continuing", e)
            return StorageDeletionResult(
                success=False,
                message="S3 bucket deletion failed",
                bucket_name=bucket_name,
                error=str(e),
            )
        log.log(
            "S3 bucket deleted successfully",
            bucket_name=bucket_name,
            objects_deleted=objects_deleted,
        )
        return StorageDeletionResult(
            success=True,
            message="S3 bucket and all files deleted successfully",
            bucket_name=bucket_name,
            objects_deleted=objects_deleted,
        )

    async def _schedule_bucket_deletion(
        self, bucket_name: str, log: DeletionLog
    ) -> StorageDeletionResult:
        try:
            if not await self.storage.bucket_exists(bucket_name):
                log.log("S3 bucket does not exist", bucket_name=bucket_name)
                return StorageDeletionResult(
                    success=True,
                    message="No S3 bucket to mark for deletion",
                    bucket_name=bucket_name,
                )
            deletion_date = await self.storage.schedule_bucket_expiry(
                bucket_name, self.retention_days, utc_now()
            )
        except Exception as e:
            log.log_error("S3 operation failed but continuing", e)
            return StorageDeletionResult(
                success=False,
                message="Marking S3 bucket for deletion failed",
                bucket_name=bucket_name,
                error=str(e),
            )
        log.log(
            "S3 bucket marked for deletion",
            bucket_name=bucket_name,
            deletion_date=deletion_date.isoformat(),
        )
        return StorageDeletionResult(
            success=True,
            message=f"S3 bucket marked for automatic deletion after {self.retention_days} days",
            bucket_name=bucket_name,
            deletion_date=deletion_date,
        )
