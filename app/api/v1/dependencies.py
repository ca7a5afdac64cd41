"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers: the orchestrators are assembled here
from the SQLAlchemy unit of work, the boto3 bucket service, the identity
provider and the placeholder capabilities.
"""

from __future__ import annotations

import hmac
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.services import IIdentityProvider, ITenantBucketStorage
from app.application.services import (
    TenantDeletionService,
    TenantFileService,
    TenantPlanLimitService,
    TenantProvisioningService,
)
from app.core.config import get_settings
from app.domain.events import LifecycleEventDispatcher
from app.infrastructure.external.identity import create_identity_provider
from app.infrastructure.external.storage import TenantBucketService
from app.infrastructure.persistence.database import get_db
from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from app.infrastructure.services import (
    InMemoryRoleProvisioner,
    PlaceholderDropdownSeeder,
    PlaceholderNotificationService,
    PlaceholderSubscriptionService,
)

ADMIN_SECRET_HEADER = "X-Admin-Secret"


async def require_admin_secret(
    x_admin_secret: Annotated[str | None, Header(alias=ADMIN_SECRET_HEADER)] = None,
) -> None:
    """Reject requests without the shared admin secret.

    503 when ADMIN_API_SECRET is not configured, 401 when the header is
    missing or does not match.
    """
    configured = get_settings().admin_api_secret
    if configured is None or not configured.get_secret_value():
        raise HTTPException(
            status_code=503,
            detail="Admin API is not configured (ADMIN_API_SECRET is not set).",
        )
    expected = configured.get_secret_value().encode()
    if not x_admin_secret or not hmac.compare_digest(x_admin_secret.encode(), expected):
        raise HTTPException(status_code=401, detail="Unauthorized")


async def get_uow(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SqlAlchemyUnitOfWork:
    """Unit of work on the request session; the services own their commits."""
    return SqlAlchemyUnitOfWork(db)


def get_event_dispatcher(request: Request) -> LifecycleEventDispatcher | None:
    """Dispatcher built in the lifespan; None when the app runs without one."""
    return getattr(request.app.state, "events", None)


@lru_cache
def get_bucket_storage() -> ITenantBucketStorage:
    """One boto3-backed bucket service per process."""
    return TenantBucketService.from_settings(get_settings())


@lru_cache
def get_identity_provider() -> IIdentityProvider:
    """Auth0 client (holds the cached management token) or the no-op provider."""
    return create_identity_provider(get_settings())


async def get_provisioning_service(
    uow: Annotated[SqlAlchemyUnitOfWork, Depends(get_uow)],
    storage: Annotated[ITenantBucketStorage, Depends(get_bucket_storage)],
    identity_provider: Annotated[IIdentityProvider, Depends(get_identity_provider)],
    events: Annotated[LifecycleEventDispatcher | None, Depends(get_event_dispatcher)],
) -> TenantProvisioningService:
    return TenantProvisioningService(
        uow,
        storage,
        identity_provider,
        PlaceholderSubscriptionService(),
        InMemoryRoleProvisioner(),
        PlaceholderDropdownSeeder(),
        PlaceholderNotificationService(),
        events,
        bucket_prefix=get_settings().tenant_bucket_prefix,
    )


async def get_deletion_service(
    uow: Annotated[SqlAlchemyUnitOfWork, Depends(get_uow)],
    storage: Annotated[ITenantBucketStorage, Depends(get_bucket_storage)],
    events: Annotated[LifecycleEventDispatcher | None, Depends(get_event_dispatcher)],
) -> TenantDeletionService:
    settings = get_settings()
    return TenantDeletionService(
        uow,
        storage,
        events,
        bucket_prefix=settings.tenant_bucket_prefix,
        retention_days=settings.bucket_deletion_retention_days,
    )


async def get_plan_limit_service(
    uow: Annotated[SqlAlchemyUnitOfWork, Depends(get_uow)],
) -> TenantPlanLimitService:
    return TenantPlanLimitService(uow)


async def get_file_service(
    uow: Annotated[SqlAlchemyUnitOfWork, Depends(get_uow)],
    storage: Annotated[ITenantBucketStorage, Depends(get_bucket_storage)],
    limits: Annotated[TenantPlanLimitService, Depends(get_plan_limit_service)],
) -> TenantFileService:
    return TenantFileService(
        uow, storage, limits, bucket_prefix=get_settings().tenant_bucket_prefix
    )
