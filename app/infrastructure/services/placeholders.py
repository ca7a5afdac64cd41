"""Collaborators for provisioning capabilities that have no backing service yet.

Each returns CapabilityResult.not_implemented so the orchestrator records the
step as skipped (not_implemented) instead of pretending it ran. The admin
role provisioner generates the ClientAdmin role in memory.
"""

from __future__ import annotations

import logging

from app.application.dtos.capability import CapabilityResult
from app.application.dtos.role import RoleResult
from app.application.dtos.tenant import OrganizationResult, PlanResult, TenantResult
from app.application.dtos.user import UserResult
from app.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

CLIENT_ADMIN_ROLE_NAME = "ClientAdmin"
CLIENT_ADMIN_DESCRIPTION = "Client Administrator with full access to manage the organization"
CLIENT_ADMIN_OPERATIONS: tuple[str, ...] = ("create", "edit", "delete", "approve", "view")


class PlaceholderSubscriptionService:
    """ISubscriptionService without a billing backend."""

    async def create_subscription(
        self, tenant: TenantResult, plan: PlanResult
    ) -> CapabilityResult:
        logger.debug("Subscription for tenant %s on plan %s not created", tenant.id, plan.id)
        return CapabilityResult.not_implemented(
            "subscription", tenant_id=tenant.id, plan_id=plan.id
        )


class InMemoryRoleProvisioner:
    """IRoleProvisioner that generates the ClientAdmin role without storing it."""

    async def create_admin_role(self, tenant: TenantResult) -> RoleResult:
        return RoleResult(
            id=f"role_{generate_cuid()}",
            tenant_id=tenant.id,
            name=CLIENT_ADMIN_ROLE_NAME,
            description=CLIENT_ADMIN_DESCRIPTION,
            operations=CLIENT_ADMIN_OPERATIONS,
            entity_type="all",
            is_active=True,
            persisted=False,
        )


class PlaceholderDropdownSeeder:
    """IDropdownSeeder without a taxonomy store."""

    async def seed_defaults(self, tenant: TenantResult) -> CapabilityResult:
        return CapabilityResult.not_implemented("dropdowns", tenant_id=tenant.id)


class PlaceholderNotificationService:
    """INotificationService without an email transport."""

    async def send_welcome_email(
        self, user: UserResult, tenant: TenantResult
    ) -> CapabilityResult:
        return CapabilityResult.not_implemented(
            "welcome_email", tenant_id=tenant.id, recipient=user.email
        )

    async def notify_new_organization(
        self, organization: OrganizationResult, tenant: TenantResult
    ) -> CapabilityResult:
        return CapabilityResult.not_implemented(
            "saas_notification", tenant_id=tenant.id, organization_id=organization.id
        )
