"""DTOs for tenant lifecycle use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from app.application.dtos.role import RoleResult
from app.application.dtos.storage import BucketInfo, StorageDeletionResult
from app.application.dtos.user import AdminUserInput, UserResult
from app.domain.enums import BucketStatus, StorageDeletionType, TenantStatus


@dataclass(frozen=True)
class OrganizationResult:
    """Organization read-model. tenant_id is set once provisioning attaches a tenant."""

    id: str
    name: str
    email: str | None
    phone: str | None
    is_active: bool
    tenant_id: str | None = None


@dataclass(frozen=True)
class PlanResult:
    """Billing plan read-model. None ceilings mean unlimited."""

    id: str
    name: str
    tier: str
    price: Decimal
    billing_cycle: str
    is_default: bool
    is_active: bool
    max_users: int | None = None
    max_documents: int | None = None
    max_sites: int | None = None
    max_buildings: int | None = None
    max_storage_gb: int | None = None


@dataclass(frozen=True)
class TenantResult:
    """Tenant read-model."""

    id: str
    name: str
    status: TenantStatus
    organization_id: str | None
    plan_id: str | None
    is_trial: bool
    bucket_name: str | None = None
    bucket_region: str | None = None
    bucket_status: BucketStatus = BucketStatus.NOT_CREATED
    plan_start_date: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ProvisioningOptions:
    """Step toggles for provisioning. Every step is on unless turned off."""

    create_user: bool = True
    create_subscription: bool = True
    send_welcome_email: bool = True
    seed_dropdowns: bool = True
    create_s3_bucket: bool = True
    send_saas_notification: bool = True
    initialize_audit_log: bool = True
    use_transaction: bool = True


@dataclass(frozen=True)
class TenantProvisioningInput:
    """Caller input for provisioning.

    organization_name is required unless organization_id selects an existing
    organization. admin_user is optional; without it step 7 is not applicable.
    """

    organization_name: str | None = None
    email: str | None = None
    phone: str | None = None
    organization_id: str | None = None
    plan_id: str | None = None
    is_trial: bool = True
    admin_user: AdminUserInput | None = None


@dataclass(frozen=True)
class ProvisioningResult:
    """What provisioning created, plus the per-step detail map.

    success is False when a step after the persistence commit failed; the
    committed organization/tenant remain and failed_step names the step.
    """

    organization: OrganizationResult
    tenant: TenantResult
    plan: PlanResult
    role: RoleResult
    user: UserResult | None
    bucket_info: BucketInfo | None
    audit_log_initialized: bool
    transaction_id: str
    provisioning_steps: dict[str, dict[str, Any]]
    success: bool = True
    failed_step: str | None = None
    error: dict[str, Any] | None = None


@dataclass(frozen=True)
class DeletionOptions:
    """Options for full tenant deletion."""

    delete_s3: bool = True
    immediate_s3_delete: bool = False
    delete_database: bool = True
    force_delete: bool = False
    create_final_audit_log: bool = True
    actor_id: str | None = None
    actor_email: str | None = None


@dataclass(frozen=True)
class DatabaseDeletionResult:
    """Per-record-type deleted counts, keyed by TenantRecordType value, in deletion order."""

    counts: dict[str, int]

    @property
    def total_deleted(self) -> int:
        return sum(self.counts.values())


@dataclass(frozen=True)
class DeletionResult:
    """Outcome of deleting a tenant completely."""

    success: bool
    message: str
    tenant_id: str
    tenant_name: str
    database: DatabaseDeletionResult | None
    s3: StorageDeletionResult | None
    s3_deletion_type: StorageDeletionType | None
    deletion_log: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class SoftDeleteResult:
    """Outcome of deactivating a tenant without removing data."""

    success: bool
    message: str
    tenant_id: str
    tenant_name: str
    previous_status: TenantStatus
    new_status: TenantStatus
    audit_logged: bool


@dataclass(frozen=True)
class TenantUsage:
    """Row counts per tenant-scoped record type."""

    tenant_id: str
    tenant_name: str
    counts: dict[str, int]
