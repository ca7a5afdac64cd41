"""Admin tenant API schemas.

Responses are validated from the application DTOs (from_attributes), so the
routes return service results directly.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, model_validator

from app.domain.enums import BucketStatus, StorageDeletionType, TenantStatus


class _FromDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class AdminUserRequest(BaseModel):
    """Initial administrative user for the new tenant."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: SecretStr = Field(..., description="Stored as a bcrypt hash, never returned")

    @model_validator(mode="after")
    def validate_password_length(self) -> "AdminUserRequest":
        if len(self.password.get_secret_value()) < 8:
            raise ValueError("password must be at least 8 characters")
        return self


class ProvisioningOptionsRequest(BaseModel):
    """Step toggles; every step runs unless turned off."""

    create_user: bool = True
    create_subscription: bool = True
    send_welcome_email: bool = True
    seed_dropdowns: bool = True
    create_s3_bucket: bool = True
    send_saas_notification: bool = True
    initialize_audit_log: bool = True
    use_transaction: bool = True


class ProvisionTenantRequest(BaseModel):
    """Request body for POST /admin/tenants/provision.

    Either organization_name (new organization) or organization_id (existing
    organization) is required.
    """

    organization_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    organization_id: str | None = None
    plan_id: str | None = None
    is_trial: bool = True
    admin_user: AdminUserRequest | None = None
    options: ProvisioningOptionsRequest = Field(default_factory=ProvisioningOptionsRequest)

    @model_validator(mode="after")
    def require_organization(self) -> "ProvisionTenantRequest":
        if not self.organization_name and not self.organization_id:
            raise ValueError("organization_name or organization_id is required")
        return self


class OrganizationResponse(_FromDTO):
    id: str
    name: str
    email: str | None
    phone: str | None
    is_active: bool
    tenant_id: str | None = None


class PlanResponse(_FromDTO):
    id: str
    name: str
    tier: str
    price: Decimal
    billing_cycle: str
    is_default: bool
    is_active: bool


class TenantResponse(_FromDTO):
    id: str
    name: str
    status: TenantStatus
    organization_id: str | None
    plan_id: str | None
    is_trial: bool
    bucket_name: str | None = None
    bucket_region: str | None = None
    bucket_status: BucketStatus
    plan_start_date: datetime | None = None


class RoleResponse(_FromDTO):
    id: str
    name: str
    description: str
    operations: list[str]
    persisted: bool


class UserResponse(_FromDTO):
    """Admin user. The password hash is never part of the DTO."""

    id: str
    name: str
    email: str
    is_active: bool
    role_ids: list[str]
    identity_provider_id: str | None = None


class BucketInfoResponse(_FromDTO):
    bucket_name: str
    org_slug: str
    region: str
    status: str


class ProvisioningResponse(_FromDTO):
    """Everything provisioning created plus the per-step detail map."""

    success: bool
    transaction_id: str
    organization: OrganizationResponse
    tenant: TenantResponse
    plan: PlanResponse
    role: RoleResponse
    user: UserResponse | None
    bucket_info: BucketInfoResponse | None
    audit_log_initialized: bool
    provisioning_steps: dict[str, dict[str, Any]]
    failed_step: str | None = None
    error: dict[str, Any] | None = None


class DatabaseDeletionResponse(_FromDTO):
    counts: dict[str, int]
    total_deleted: int


class StorageDeletionResponse(_FromDTO):
    success: bool
    message: str
    bucket_name: str | None = None
    objects_deleted: int = 0
    deletion_date: datetime | None = None
    error: str | None = None


class DeletionResponse(_FromDTO):
    success: bool
    message: str
    tenant_id: str
    tenant_name: str
    database: DatabaseDeletionResponse | None
    s3: StorageDeletionResponse | None
    s3_deletion_type: StorageDeletionType | None
    deletion_log: list[dict[str, Any]]
    errors: list[dict[str, Any]]


class SoftDeleteRequest(BaseModel):
    """Optional actor recorded in the deactivation audit entry."""

    actor_id: str | None = None
    actor_email: EmailStr | None = None


class SoftDeleteResponse(_FromDTO):
    success: bool
    message: str
    tenant_id: str
    tenant_name: str
    previous_status: TenantStatus
    new_status: TenantStatus
    audit_logged: bool


class TenantUsageResponse(_FromDTO):
    tenant_id: str
    tenant_name: str
    counts: dict[str, int]


class PlanUsageResponse(_FromDTO):
    """Current usage beside the plan's ceilings (null ceiling means unlimited)."""

    tenant_id: str
    users: int
    documents: int
    storage_gb: float
    sites: int
    buildings: int
    floors: int
    assets: int
    vendors: int
    limits: dict[str, int | None]


class BucketDetailsResponse(_FromDTO):
    bucket_name: str
    region: str
    exists: bool
    url: str
