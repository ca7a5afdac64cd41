"""Application interfaces (ports). Infrastructure implements these protocols."""

from app.application.interfaces.repositories import (
    IAuditLogRepository,
    IOrganizationRepository,
    IPlanRepository,
    ITenantRecordRepository,
    ITenantRepository,
    IUnitOfWork,
    IUserRepository,
)
from app.application.interfaces.services import (
    IDropdownSeeder,
    IIdentityProvider,
    INotificationService,
    IRoleProvisioner,
    ISubscriptionService,
    ITenantBucketStorage,
)

__all__ = [
    "IAuditLogRepository",
    "IDropdownSeeder",
    "IIdentityProvider",
    "INotificationService",
    "IOrganizationRepository",
    "IPlanRepository",
    "IRoleProvisioner",
    "ISubscriptionService",
    "ITenantBucketStorage",
    "ITenantRecordRepository",
    "ITenantRepository",
    "IUnitOfWork",
    "IUserRepository",
]
