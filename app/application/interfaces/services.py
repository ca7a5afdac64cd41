"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators of the lifecycle orchestrators
(DIP): object storage, identity provider, and the optional capabilities
(subscription, role, dropdown seeding, notifications).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.capability import CapabilityResult
    from app.application.dtos.role import RoleResult
    from app.application.dtos.storage import BucketDetails, BucketInfo, StoredObject
    from app.application.dtos.tenant import (
        OrganizationResult,
        PlanResult,
        TenantResult,
    )
    from app.application.dtos.user import IdentityUser, UserResult


class ITenantBucketStorage(Protocol):
    """Per-tenant object-storage bucket operations.

    Implementations raise StorageOperationException on provider errors.
    """

    region: str

    async def bucket_exists(self, bucket_name: str) -> bool:
        """Return True if the bucket exists and is reachable."""

    async def ensure_tenant_bucket(
        self, bucket_name: str, tenant_id: str, organization_name: str
    ) -> BucketInfo:
        """Create bucket with versioning, lifecycle policy and tags unless it already exists."""

    async def delete_bucket_and_contents(self, bucket_name: str) -> int:
        """Delete every object (and version) then the bucket; return objects removed."""

    async def schedule_bucket_expiry(
        self, bucket_name: str, retention_days: int, now: datetime
    ) -> datetime:
        """Tag bucket PendingDeletion and expire all content after retention_days; return deletion date."""

    async def get_bucket_info(self, bucket_name: str) -> BucketDetails:
        """Region, URL and existence of bucket."""

    async def upload_object(
        self,
        bucket_name: str,
        key: str,
        body: bytes,
        *,
        file_name: str,
        content_type: str,
        metadata: dict[str, str],
    ) -> StoredObject:
        """Write one encrypted object under key."""

    async def generate_presigned_url(
        self, bucket_name: str, key: str, expires_in: int = 3600
    ) -> str:
        """Time-limited download URL for key."""

    async def delete_object(
        self, bucket_name: str, key: str, version_id: str | None = None
    ) -> None:
        """Delete key, or one version of it."""


class IIdentityProvider(Protocol):
    """External identity provider (eventually consistent).

    Implementations raise ExternalServiceException on provider errors.
    A disabled provider reports enabled=False and performs no calls.
    """

    enabled: bool

    async def get_user_by_email(self, email: str) -> IdentityUser | None:
        """Return the provider account for email, if any."""

    async def create_user(
        self,
        email: str,
        name: str,
        password: str | None,
        tenant_id: str,
        role_ids: tuple[str, ...],
    ) -> IdentityUser | None:
        """Create account; temporary password when password is None."""

    async def update_user(
        self, user_id: str, changes: dict[str, Any]
    ) -> IdentityUser | None:
        """Patch account attributes."""

    async def delete_user(self, user_id: str) -> None:
        """Delete account."""

    async def send_password_reset(self, email: str) -> str | None:
        """Trigger the provider's password-change email; return provider message."""


class ISubscriptionService(Protocol):
    """Billing subscription creation."""

    async def create_subscription(
        self, tenant: TenantResult, plan: PlanResult
    ) -> CapabilityResult:
        """Start a subscription for tenant on plan."""


class IRoleProvisioner(Protocol):
    """Administrative role creation for a new tenant."""

    async def create_admin_role(self, tenant: TenantResult) -> RoleResult:
        """Return the tenant's full-access administrative role."""


class IDropdownSeeder(Protocol):
    """Default taxonomy/dropdown values for a new tenant."""

    async def seed_defaults(self, tenant: TenantResult) -> CapabilityResult:
        """Seed default values for tenant."""


class INotificationService(Protocol):
    """Outbound notifications sent by provisioning."""

    async def send_welcome_email(
        self, user: UserResult, tenant: TenantResult
    ) -> CapabilityResult:
        """Welcome the tenant's first administrator."""

    async def notify_new_organization(
        self, organization: OrganizationResult, tenant: TenantResult
    ) -> CapabilityResult:
        """Notify the internal distribution list of a new tenant."""
