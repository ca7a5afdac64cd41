"""Application layer: DTOs, interfaces, lifecycle services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, storage, identity provider).
"""

from app.application.interfaces import (
    IIdentityProvider,
    ITenantBucketStorage,
    IUnitOfWork,
)
from app.application.services import TenantDeletionService, TenantProvisioningService

__all__ = [
    "IIdentityProvider",
    "ITenantBucketStorage",
    "IUnitOfWork",
    "TenantDeletionService",
    "TenantProvisioningService",
]
