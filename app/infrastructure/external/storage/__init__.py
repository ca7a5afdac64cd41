"""Object storage: one S3 bucket per tenant.

TenantBucketService implements ITenantBucketStorage with boto3 (sync client
run in threads).
"""

from app.infrastructure.external.storage.tenant_bucket_service import (
    TenantBucketService,
)

__all__ = ["TenantBucketService"]
