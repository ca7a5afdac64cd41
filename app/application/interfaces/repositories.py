"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from app.domain.enums import BucketStatus, TenantRecordType, TenantStatus

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
    from app.application.dtos.tenant import (
        OrganizationResult,
        PlanResult,
        TenantResult,
    )
    from app.application.dtos.user import UserResult


class IOrganizationRepository(Protocol):
    """Protocol for organization repository (DIP)."""

    async def get_by_id(self, organization_id: str) -> OrganizationResult | None:
        """Return organization by ID."""

    async def get_by_name(self, name: str) -> OrganizationResult | None:
        """Return organization with exactly this name, if any."""

    async def create_organization(
        self, name: str, email: str | None, phone: str | None
    ) -> OrganizationResult:
        """Create organization; raise DuplicateNameException on name collision."""

    async def attach_tenant(
        self, organization_id: str, tenant_id: str
    ) -> OrganizationResult:
        """Record the owning tenant on the organization."""


class IPlanRepository(Protocol):
    """Protocol for billing plan repository (DIP)."""

    async def get_by_id(self, plan_id: str) -> PlanResult | None:
        """Return plan by ID."""

    async def get_or_create_default(self) -> PlanResult:
        """Return the default plan, creating the zero-cost default if absent."""


class ITenantRepository(Protocol):
    """Protocol for tenant repository (DIP)."""

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:
        """Return tenant by ID."""

    async def create_tenant(
        self,
        name: str,
        organization_id: str,
        plan_id: str,
        is_trial: bool,
        plan_start_date: datetime,
    ) -> TenantResult:
        """Create tenant (status trial when is_trial else active)."""

    async def update_plan(
        self,
        tenant_id: str,
        plan_id: str,
        is_trial: bool,
        plan_start_date: datetime,
    ) -> TenantResult:
        """Re-point an existing tenant at a plan and trial flag."""

    async def update_status(
        self, tenant_id: str, status: TenantStatus
    ) -> TenantResult:
        """Set tenant status; raise TenantNotFoundException if the tenant is gone."""

    async def attach_bucket(
        self,
        tenant_id: str,
        bucket_name: str,
        region: str,
        status: BucketStatus,
    ) -> TenantResult:
        """Persist bucket name/region/status on the tenant."""

    async def set_bucket_status(self, tenant_id: str, status: BucketStatus) -> None:
        """Persist bucket status only."""

    async def delete_tenant(self, tenant_id: str) -> bool:
        """Delete the tenant row; return True if a row was removed."""


class IUserRepository(Protocol):
    """Protocol for user repository (DIP)."""

    async def get_by_email(self, email: str) -> UserResult | None:
        """Return user with this email in any tenant."""

    async def create_user(
        self,
        tenant_id: str,
        name: str,
        email: str,
        password: str,
        role_ids: tuple[str, ...],
    ) -> UserResult:
        """Create active user with hashed password; raise DuplicateEmailException on collision."""

    async def set_identity_provider_id(
        self, user_id: str, identity_provider_id: str
    ) -> UserResult:
        """Link user to its identity-provider account."""

    async def count_active(self, tenant_id: str) -> int:
        """Return number of active users in tenant."""


class IAuditLogRepository(Protocol):
    """Protocol for the append-only audit sink (DIP)."""

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry."""


class ITenantRecordRepository(Protocol):
    """Tenant-scoped bulk operations over every TenantRecordType."""

    async def delete_by_tenant(
        self, record_type: TenantRecordType, tenant_id: str
    ) -> int:
        """Delete all rows of record_type for tenant; return deleted count (0 is not an error)."""

    async def count_by_tenant(
        self, record_type: TenantRecordType, tenant_id: str
    ) -> int:
        """Return row count of record_type for tenant."""

    async def total_document_bytes(self, tenant_id: str) -> int:
        """Sum of stored document sizes for tenant; documents without a size count as 0."""


class IUnitOfWork(Protocol):
    """Repositories sharing one database session, plus its transaction control.

    transaction() commits on normal exit and rolls back on any exception.
    commit()/rollback() act on the session's current transaction.
    """

    organizations: IOrganizationRepository
    plans: IPlanRepository
    tenants: ITenantRepository
    users: IUserRepository
    audit_logs: IAuditLogRepository
    records: ITenantRecordRepository

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Scope a single transaction."""

    async def commit(self) -> None:
        """Commit pending work."""

    async def rollback(self) -> None:
        """Discard pending work."""
