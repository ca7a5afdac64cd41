"""Tenant repository. Returns application DTOs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.tenant import TenantResult
from app.domain.enums import BucketStatus, TenantStatus
from app.domain.exceptions import TenantNotFoundException
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.repositories.base import BaseRepository, execute


def _tenant_to_result(t: Tenant) -> TenantResult:
    """Map ORM Tenant to application TenantResult."""
    return TenantResult(
        id=t.id,
        name=t.name,
        status=TenantStatus(t.status),
        organization_id=t.organization_id,
        plan_id=t.plan_id,
        is_trial=t.is_trial,
        bucket_name=t.bucket_name,
        bucket_region=t.bucket_region,
        bucket_status=BucketStatus(t.bucket_status),
        plan_start_date=t.plan_start_date,
        created_at=t.created_at,
    )


class TenantRepository(BaseRepository[Tenant]):
    """Tenant repository. Mutators raise TenantNotFoundException for unknown ids."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Tenant)

    async def _require(self, tenant_id: str) -> Tenant:
        tenant = await self.get_entity(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        return tenant

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:
        tenant = await self.get_entity(tenant_id)
        return _tenant_to_result(tenant) if tenant else None

    async def create_tenant(
        self,
        name: str,
        organization_id: str,
        plan_id: str,
        is_trial: bool,
        plan_start_date: datetime,
    ) -> TenantResult:
        """Create tenant; status is trial when is_trial else active."""
        status = TenantStatus.TRIAL if is_trial else TenantStatus.ACTIVE
        tenant = Tenant(
            name=name,
            status=status.value,
            organization_id=organization_id,
            plan_id=plan_id,
            is_trial=is_trial,
            plan_start_date=plan_start_date,
            bucket_status=BucketStatus.NOT_CREATED.value,
        )
        return _tenant_to_result(await self.add(tenant))

    async def update_plan(
        self,
        tenant_id: str,
        plan_id: str,
        is_trial: bool,
        plan_start_date: datetime,
    ) -> TenantResult:
        tenant = await self._require(tenant_id)
        tenant.plan_id = plan_id
        tenant.is_trial = is_trial
        tenant.plan_start_date = plan_start_date
        return _tenant_to_result(await self.save(tenant))

    async def update_status(self, tenant_id: str, status: TenantStatus) -> TenantResult:
        tenant = await self._require(tenant_id)
        tenant.status = status.value
        return _tenant_to_result(await self.save(tenant))

    async def attach_bucket(
        self,
        tenant_id: str,
        bucket_name: str,
        region: str,
        status: BucketStatus,
    ) -> TenantResult:
        tenant = await self._require(tenant_id)
        tenant.bucket_name = bucket_name
        tenant.bucket_region = region
        tenant.bucket_status = status.value
        return _tenant_to_result(await self.save(tenant))

    async def set_bucket_status(self, tenant_id: str, status: BucketStatus) -> None:
        tenant = await self._require(tenant_id)
        tenant.bucket_status = status.value
        await self.save(tenant)

    async def delete_tenant(self, tenant_id: str) -> bool:
        """Delete the tenant row with a bulk statement; return True if a row was removed."""
        result = await execute(
            self.db, delete(Tenant).where(Tenant.id == tenant_id), "delete tenant"
        )
        return (result.rowcount or 0) > 0
