"""Application DTOs (no ORM dependency)."""

from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from app.application.dtos.capability import CapabilityResult
from app.application.dtos.plan_limits import PlanUsage
from app.application.dtos.role import RoleResult
from app.application.dtos.storage import (
    BucketDetails,
    BucketInfo,
    StorageDeletionResult,
    StoredObject,
)
from app.application.dtos.tenant import (
    DatabaseDeletionResult,
    DeletionOptions,
    DeletionResult,
    OrganizationResult,
    PlanResult,
    ProvisioningOptions,
    ProvisioningResult,
    SoftDeleteResult,
    TenantProvisioningInput,
    TenantResult,
    TenantUsage,
)
from app.application.dtos.user import AdminUserInput, IdentityUser, UserResult

__all__ = [
    "AdminUserInput",
    "AuditLogEntryCreate",
    "AuditLogResult",
    "BucketDetails",
    "BucketInfo",
    "CapabilityResult",
    "DatabaseDeletionResult",
    "DeletionOptions",
    "DeletionResult",
    "IdentityUser",
    "OrganizationResult",
    "PlanResult",
    "PlanUsage",
    "ProvisioningOptions",
    "ProvisioningResult",
    "RoleResult",
    "SoftDeleteResult",
    "StorageDeletionResult",
    "StoredObject",
    "TenantProvisioningInput",
    "TenantResult",
    "TenantUsage",
    "UserResult",
]
