"""Tenant files: uploads into the tenant's bucket, download links and removal.

Uploads are checked against the plan's storage ceiling first. A tenant whose
bucket was never created (or failed) gets one on first upload.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from app.application.dtos.storage import BucketDetails, StoredObject
from app.application.dtos.tenant import TenantResult
from app.application.interfaces.repositories import IUnitOfWork
from app.application.interfaces.services import ITenantBucketStorage
from app.application.services.tenant_plan_limit_service import TenantPlanLimitService
from app.domain.enums import BucketStatus
from app.domain.exceptions import TenantNotFoundException
from app.shared.utils.bucket_naming import generate_bucket_name
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def build_object_key(
    file_name: str, custom_path: str | None = None, now: datetime | None = None
) -> str:
    """Unique object key for file_name.

    Default layout is documents/YYYY/MM/DD/<ms timestamp>-<cuid>-<name><ext>;
    with custom_path it is <custom_path>/<cuid>-<name><ext>. Characters
    outside [a-zA-Z0-9-_] in the base name become underscores.
    """
    stem, dot, extension = file_name.rpartition(".")
    if not dot:
        stem, extension = file_name, ""
    clean = _UNSAFE_KEY_CHARS.sub("_", stem) or "file"
    suffix = f".{extension.lower()}" if extension else ""
    unique = generate_cuid()
    if custom_path:
        return f"{custom_path.strip('/')}/{unique}-{clean}{suffix}"
    now = now or utc_now()
    timestamp = int(now.timestamp() * 1000)
    return f"documents/{now:%Y/%m/%d}/{timestamp}-{unique}-{clean}{suffix}"


class TenantFileService:
    """Object access within a tenant's bucket."""

    def __init__(
        self,
        uow: IUnitOfWork,
        storage: ITenantBucketStorage,
        limits: TenantPlanLimitService,
        *,
        bucket_prefix: str = "fulq-org",
    ) -> None:
        self.uow = uow
        self.storage = storage
        self.limits = limits
        self.bucket_prefix = bucket_prefix

    async def upload_file(
        self,
        tenant_id: str,
        file_name: str,
        content: bytes,
        content_type: str,
        custom_path: str | None = None,
    ) -> StoredObject:
        """Store content in the tenant's bucket, creating the bucket if needed.

        Raises:
            TenantNotFoundException: no such tenant.
            PlanLimitExceededException: the upload would pass max_storage_gb.
            StorageOperationException: the bucket could not be created or written.
        """
        await self.limits.check_can_upload_file(tenant_id, len(content))
        tenant = await self._get_tenant(tenant_id)
        bucket_name = await self._ready_bucket(tenant)
        key = build_object_key(file_name, custom_path)
        stored = await self.storage.upload_object(
            bucket_name,
            key,
            content,
            file_name=file_name,
            content_type=content_type,
            metadata={
                "original-filename": file_name,
                "tenant-id": tenant_id,
                "upload-date": utc_now().isoformat(),
                "file-size": str(len(content)),
            },
        )
        logger.info("Tenant %s uploaded %s (%d bytes)", tenant_id, key, stored.file_size)
        return stored

    async def get_download_url(
        self, tenant_id: str, key: str, expires_in: int = 3600
    ) -> str:
        tenant = await self._get_tenant(tenant_id)
        return await self.storage.generate_presigned_url(
            self.bucket_name_for(tenant), key, expires_in
        )

    async def delete_file(
        self, tenant_id: str, key: str, version_id: str | None = None
    ) -> None:
        tenant = await self._get_tenant(tenant_id)
        await self.storage.delete_object(self.bucket_name_for(tenant), key, version_id)

    async def get_bucket_details(self, tenant_id: str) -> BucketDetails:
        tenant = await self._get_tenant(tenant_id)
        return await self.storage.get_bucket_info(self.bucket_name_for(tenant))

    def bucket_name_for(self, tenant: TenantResult) -> str:
        """Stored bucket name, or the one provisioning would derive."""
        return tenant.bucket_name or generate_bucket_name(
            self.bucket_prefix, tenant.name, tenant.id
        )

    async def _get_tenant(self, tenant_id: str) -> TenantResult:
        tenant = await self.uow.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        return tenant

    async def _ready_bucket(self, tenant: TenantResult) -> str:
        bucket_name = self.bucket_name_for(tenant)
        if tenant.bucket_status is BucketStatus.CREATED:
            return bucket_name
        logger.info("Tenant %s has no bucket yet; creating %s", tenant.id, bucket_name)
        info = await self.storage.ensure_tenant_bucket(bucket_name, tenant.id, tenant.name)
        await self.uow.tenants.attach_bucket(
            tenant.id, info.bucket_name, info.region, BucketStatus.CREATED
        )
        await self.uow.commit()
        return info.bucket_name
