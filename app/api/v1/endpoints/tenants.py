"""Admin tenant API: thin routes delegating to the tenant lifecycle services.

Every route requires the X-Admin-Secret header. Domain exceptions are mapped
to status codes by the handlers in app.core.exception_handlers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_deletion_service,
    get_file_service,
    get_plan_limit_service,
    get_provisioning_service,
    require_admin_secret,
)
from app.application.dtos.tenant import (
    DeletionOptions,
    ProvisioningOptions,
    TenantProvisioningInput,
)
from app.application.dtos.user import AdminUserInput
from app.application.services import (
    TenantDeletionService,
    TenantFileService,
    TenantPlanLimitService,
    TenantProvisioningService,
)
from app.schemas.tenant import (
    BucketDetailsResponse,
    DeletionResponse,
    PlanUsageResponse,
    ProvisioningResponse,
    ProvisionTenantRequest,
    SoftDeleteRequest,
    SoftDeleteResponse,
    TenantUsageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin_secret)])


def _to_input(body: ProvisionTenantRequest) -> TenantProvisioningInput:
    admin = body.admin_user
    return TenantProvisioningInput(
        organization_name=body.organization_name,
        email=body.email,
        phone=body.phone,
        organization_id=body.organization_id,
        plan_id=body.plan_id,
        is_trial=body.is_trial,
        admin_user=(
            AdminUserInput(
                name=admin.name,
                email=admin.email,
                password=admin.password.get_secret_value(),
            )
            if admin is not None
            else None
        ),
    )


@router.post("/provision", response_model=ProvisioningResponse, status_code=201)
async def provision_tenant(
    body: ProvisionTenantRequest,
    service: Annotated[TenantProvisioningService, Depends(get_provisioning_service)],
) -> ProvisioningResponse:
    """Create organization, tenant, admin user and bucket in one call.

    A failure after the persistence commit still returns 201 with
    success=false and failed_step set; the tenant exists.
    """
    result = await service.provision_tenant(
        _to_input(body), ProvisioningOptions(**body.options.model_dump())
    )
    return ProvisioningResponse.model_validate(result)


@router.delete("/{tenant_id}", response_model=DeletionResponse)
async def delete_tenant(
    tenant_id: str,
    service: Annotated[TenantDeletionService, Depends(get_deletion_service)],
    delete_s3: bool = Query(default=True),
    immediate_s3_delete: bool = Query(default=False),
    delete_database: bool = Query(default=True),
    force_delete: bool = Query(default=False),
    create_final_audit_log: bool = Query(default=True),
    actor_id: str | None = Query(default=None),
    actor_email: str | None = Query(default=None),
) -> DeletionResponse:
    """Delete a tenant and its records; dispose of its bucket now or by expiry."""
    options = DeletionOptions(
        delete_s3=delete_s3,
        immediate_s3_delete=immediate_s3_delete,
        delete_database=delete_database,
        force_delete=force_delete,
        create_final_audit_log=create_final_audit_log,
        actor_id=actor_id,
        actor_email=actor_email,
    )
    logger.info("Admin deletion requested for tenant %s", tenant_id)
    result = await service.delete_tenant_completely(tenant_id, options)
    return DeletionResponse.model_validate(result)


@router.post("/{tenant_id}/deactivate", response_model=SoftDeleteResponse)
async def deactivate_tenant(
    tenant_id: str,
    service: Annotated[TenantDeletionService, Depends(get_deletion_service)],
    body: SoftDeleteRequest | None = None,
) -> SoftDeleteResponse:
    """Soft delete: mark the tenant inactive, keep all data."""
    body = body or SoftDeleteRequest()
    result = await service.soft_delete_tenant(
        tenant_id, actor_id=body.actor_id, actor_email=body.actor_email
    )
    return SoftDeleteResponse.model_validate(result)


@router.get("/{tenant_id}/usage", response_model=TenantUsageResponse)
async def get_tenant_usage(
    tenant_id: str,
    service: Annotated[TenantDeletionService, Depends(get_deletion_service)],
) -> TenantUsageResponse:
    result = await service.get_tenant_usage(tenant_id)
    return TenantUsageResponse.model_validate(result)


@router.get("/{tenant_id}/limits", response_model=PlanUsageResponse)
async def get_tenant_limits(
    tenant_id: str,
    service: Annotated[TenantPlanLimitService, Depends(get_plan_limit_service)],
) -> PlanUsageResponse:
    """Usage against the plan ceilings that currently apply."""
    usage = await service.calculate_usage(tenant_id)
    return PlanUsageResponse.model_validate(usage)


@router.get("/{tenant_id}/bucket", response_model=BucketDetailsResponse)
async def get_tenant_bucket(
    tenant_id: str,
    service: Annotated[TenantFileService, Depends(get_file_service)],
) -> BucketDetailsResponse:
    details = await service.get_bucket_details(tenant_id)
    return BucketDetailsResponse.model_validate(details)
