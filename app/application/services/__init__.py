"""Application services: tenant lifecycle orchestrators."""

from app.application.services.tenant_deletion_service import TenantDeletionService
from app.application.services.tenant_file_service import TenantFileService
from app.application.services.tenant_plan_limit_service import TenantPlanLimitService
from app.application.services.tenant_provisioning_service import (
    TenantProvisioningService,
)

__all__ = [
    "TenantDeletionService",
    "TenantFileService",
    "TenantPlanLimitService",
    "TenantProvisioningService",
]
