"""Plan ceilings: whether a tenant may create more of a resource or store more bytes.

A null ceiling means unlimited. Ceilings only apply while the tenant is in
trial or active; an inactive tenant, or one pending deletion, is not
restricted.
"""

from __future__ import annotations

import logging

from app.application.dtos.plan_limits import BYTES_PER_GB, PlanUsage, bytes_to_gb
from app.application.dtos.tenant import PlanResult
from app.application.interfaces.repositories import IUnitOfWork
from app.domain.enums import TenantRecordType, TenantStatus
from app.domain.exceptions import PlanLimitExceededException, TenantNotFoundException

logger = logging.getLogger(__name__)

_UNRESTRICTED_STATUSES = frozenset({TenantStatus.INACTIVE, TenantStatus.PENDING_DELETION})


class TenantPlanLimitService:
    """Checks resource creation against the tenant's plan."""

    def __init__(self, uow: IUnitOfWork) -> None:
        self.uow = uow

    async def get_active_plan(self, tenant_id: str) -> PlanResult | None:
        """The plan whose ceilings apply to tenant, or None when none do.

        Raises:
            TenantNotFoundException: no such tenant.
        """
        tenant = await self.uow.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        if tenant.status in _UNRESTRICTED_STATUSES:
            return None
        return await self.uow.plans.get_by_id(tenant.plan_id)

    async def calculate_usage(self, tenant_id: str) -> PlanUsage:
        plan = await self.get_active_plan(tenant_id)
        count = self.uow.records.count_by_tenant
        return PlanUsage(
            tenant_id=tenant_id,
            plan=plan,
            users=await count(TenantRecordType.USERS, tenant_id),
            documents=await count(TenantRecordType.DOCUMENTS, tenant_id),
            storage_gb=await self.storage_used_gb(tenant_id),
            sites=await count(TenantRecordType.SITES, tenant_id),
            buildings=await count(TenantRecordType.BUILDINGS, tenant_id),
            floors=await count(TenantRecordType.FLOORS, tenant_id),
            assets=await count(TenantRecordType.ASSETS, tenant_id),
            vendors=await count(TenantRecordType.VENDORS, tenant_id),
        )

    async def storage_used_gb(self, tenant_id: str) -> float:
        return bytes_to_gb(await self.uow.records.total_document_bytes(tenant_id))

    async def check_can_create_user(self, tenant_id: str) -> None:
        await self._check_count(tenant_id, TenantRecordType.USERS, "max_users", "add more users")

    async def check_can_create_document(self, tenant_id: str) -> None:
        await self._check_count(
            tenant_id, TenantRecordType.DOCUMENTS, "max_documents", "upload more documents"
        )

    async def check_can_create_site(self, tenant_id: str) -> None:
        await self._check_count(tenant_id, TenantRecordType.SITES, "max_sites", "add more sites")

    async def check_can_create_building(self, tenant_id: str) -> None:
        await self._check_count(
            tenant_id, TenantRecordType.BUILDINGS, "max_buildings", "add more buildings"
        )

    async def check_can_upload_file(self, tenant_id: str, file_size_bytes: int = 0) -> None:
        """Raise PlanLimitExceededException if the upload would pass max_storage_gb."""
        plan = await self.get_active_plan(tenant_id)
        if plan is None or plan.max_storage_gb is None:
            return
        used_bytes = await self.uow.records.total_document_bytes(tenant_id)
        projected = (used_bytes + file_size_bytes) / BYTES_PER_GB
        if projected > plan.max_storage_gb:
            logger.info(
                "Tenant %s upload of %d bytes refused: %.2fGB of %dGB",
                tenant_id,
                file_size_bytes,
                projected,
                plan.max_storage_gb,
            )
            raise PlanLimitExceededException(
                tenant_id,
                "storage_gb",
                plan.max_storage_gb,
                round(projected, 2),
                "Plan limit reached. This upload would exceed your storage limit "
                f"({projected:.2f}GB/{plan.max_storage_gb}GB). "
                "Please upgrade your plan or delete some files.",
            )

    async def _check_count(
        self, tenant_id: str, record_type: TenantRecordType, ceiling: str, action: str
    ) -> None:
        plan = await self.get_active_plan(tenant_id)
        limit = getattr(plan, ceiling) if plan is not None else None
        if limit is None:
            return
        current = await self.uow.records.count_by_tenant(record_type, tenant_id)
        if current < limit:
            return
        resource = record_type.value
        logger.info(
            "Tenant %s refused new %s: %d of %d used", tenant_id, resource, current, limit
        )
        raise PlanLimitExceededException(
            tenant_id,
            resource,
            limit,
            current,
            f"Plan limit reached. Your plan allows {limit} {resource}. "
            f"Current: {current}/{limit}. Please upgrade your plan to {action}.",
        )
