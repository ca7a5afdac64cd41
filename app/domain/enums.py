"""Domain enumerations for tenant lifecycle.

Enums represent fixed sets of domain values (tenant status, bucket status,
orchestration step status).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TenantStatus(_ValuesMixin, str, Enum):
    """Tenant lifecycle status."""

    TRIAL = "trial"
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING_DELETION = "pending_deletion"


class BucketStatus(_ValuesMixin, str, Enum):
    """State of the tenant's dedicated object-storage bucket as stored on the tenant."""

    NOT_CREATED = "not_created"
    PENDING = "pending"
    CREATED = "created"
    FAILED = "failed"


class StepStatus(_ValuesMixin, str, Enum):
    """Status of one provisioning step."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SkipReason(_ValuesMixin, str, Enum):
    """Why a provisioning step did not run.

    DISABLED: turned off by options. NOT_IMPLEMENTED: the capability behind the
    step is a placeholder. NOT_APPLICABLE: nothing to do (e.g. no admin user
    requested). ABORTED: an earlier step failed.
    """

    DISABLED = "disabled"
    NOT_IMPLEMENTED = "not_implemented"
    NOT_APPLICABLE = "not_applicable"
    ABORTED = "aborted"


class StorageDeletionType(_ValuesMixin, str, Enum):
    """How the tenant bucket is disposed of during deletion."""

    IMMEDIATE = "immediate"
    SCHEDULED = "scheduled_90_days"


class TenantRecordType(_ValuesMixin, str, Enum):
    """Tenant-scoped record types removed by full tenant deletion.

    Full deletion removes them in TENANT_RECORD_DELETION_ORDER, not in
    declaration order.
    """

    DOCUMENT_COMMENTS = "document_comments"
    APPROVAL_HISTORY = "approval_history"
    DOCUMENTS = "documents"
    ASSETS = "assets"
    FLOORS = "floors"
    BUILDINGS = "buildings"
    SITES = "sites"
    ORGANIZATIONS = "organizations"
    VENDORS = "vendors"
    EMAIL_NOTIFICATIONS = "email_notifications"
    NOTIFICATIONS = "notifications"
    SETTINGS = "settings"
    USERS = "users"
    AUDIT_LOGS = "audit_logs"


# Children before parents (comments and approvals before documents, floors
# before buildings before sites); users before their audit trail.
TENANT_RECORD_DELETION_ORDER: tuple[TenantRecordType, ...] = (
    TenantRecordType.DOCUMENT_COMMENTS,
    TenantRecordType.APPROVAL_HISTORY,
    TenantRecordType.DOCUMENTS,
    TenantRecordType.ASSETS,
    TenantRecordType.FLOORS,
    TenantRecordType.BUILDINGS,
    TenantRecordType.SITES,
    TenantRecordType.ORGANIZATIONS,
    TenantRecordType.VENDORS,
    TenantRecordType.EMAIL_NOTIFICATIONS,
    TenantRecordType.NOTIFICATIONS,
    TenantRecordType.SETTINGS,
    TenantRecordType.USERS,
    TenantRecordType.AUDIT_LOGS,
)
