"""Domain layer: enums, exceptions and lifecycle events.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    TENANT_RECORD_DELETION_ORDER,
    BucketStatus,
    SkipReason,
    StepStatus,
    StorageDeletionType,
    TenantRecordType,
    TenantStatus,
)
from app.domain.events import LifecycleEvent, LifecycleEventDispatcher
from app.domain.exceptions import (
    ActiveUsersExistException,
    DatabaseDeletionException,
    DatabaseOperationException,
    DuplicateEmailException,
    DuplicateException,
    DuplicateNameException,
    ExternalServiceException,
    LifecycleException,
    NotFoundException,
    ProvisioningException,
    StorageOperationException,
    TenantNotFoundException,
    ValidationException,
)

__all__ = [
    # Enums
    "BucketStatus",
    "SkipReason",
    "StepStatus",
    "StorageDeletionType",
    "TENANT_RECORD_DELETION_ORDER",
    "TenantRecordType",
    "TenantStatus",
    # Events
    "LifecycleEvent",
    "LifecycleEventDispatcher",
    # Exceptions
    "ActiveUsersExistException",
    "DatabaseDeletionException",
    "DatabaseOperationException",
    "DuplicateEmailException",
    "DuplicateException",
    "DuplicateNameException",
    "ExternalServiceException",
    "LifecycleException",
    "NotFoundException",
    "ProvisioningException",
    "StorageOperationException",
    "TenantNotFoundException",
    "ValidationException",
]
