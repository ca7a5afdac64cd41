"""Per-tenant S3 buckets: lifecycle (creation, removal, scheduled expiry) and object access.

Uses boto3 (sync) via asyncio.to_thread for the async API. Compatible with
AWS S3 and S3-compatible endpoints (MinIO) when endpoint_url is set.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.application.dtos.storage import BucketDetails, BucketInfo, StoredObject
from app.core.config import Settings
from app.domain.exceptions import StorageOperationException
from app.shared.utils.bucket_naming import generate_org_slug
from app.shared.utils.datetime import days_from, ensure_utc, isoformat_utc, utc_now

logger = logging.getLogger(__name__)

DELETE_BATCH_SIZE = 1000
SOFT_DELETED_OBJECT_RETENTION_DAYS = 90
INCOMPLETE_UPLOAD_RETENTION_DAYS = 7
TRANSITION_TO_IA_DAYS = 30
TRANSITION_TO_GLACIER_DAYS = 90
_MISSING_BUCKET_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})
_SERVICE_TAG = "tenant-lifecycle"


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


def standard_lifecycle_rules() -> list[dict[str, Any]]:
    """Lifecycle rules applied to every new tenant bucket."""
    return [
        {
            "ID": "DeleteSoftDeletedObjects",
            "Status": "Enabled",
            "Filter": {"Tag": {"Key": "Status", "Value": "SoftDeleted"}},
            "Expiration": {"Days": SOFT_DELETED_OBJECT_RETENTION_DAYS},
        },
        {
            "ID": "DeleteIncompleteMultipartUploads",
            "Status": "Enabled",
            "Filter": {},
            "AbortIncompleteMultipartUpload": {
                "DaysAfterInitiation": INCOMPLETE_UPLOAD_RETENTION_DAYS
            },
        },
        {
            "ID": "TransitionToIA",
            "Status": "Enabled",
            "Filter": {},
            "Transitions": [
                {"Days": TRANSITION_TO_IA_DAYS, "StorageClass": "STANDARD_IA"}
            ],
        },
        {
            "ID": "TransitionToGlacier",
            "Status": "Enabled",
            "Filter": {},
            "Transitions": [
                {"Days": TRANSITION_TO_GLACIER_DAYS, "StorageClass": "GLACIER"}
            ],
        },
    ]


def expiry_lifecycle_rule(retention_days: int) -> dict[str, Any]:
    """Rule that expires every object and version after retention_days."""
    return {
        "ID": f"DeleteTenantBucketAfter{retention_days}Days",
        "Status": "Enabled",
        "Filter": {},
        "Expiration": {"Days": retention_days},
        "NoncurrentVersionExpiration": {"NoncurrentDays": retention_days},
        "AbortIncompleteMultipartUpload": {"DaysAfterInitiation": 1},
    }


def merge_tags(
    existing: list[dict[str, str]], updates: dict[str, str]
) -> list[dict[str, str]]:
    """Return existing tags with updates applied; one entry per key, updates win."""
    merged = {tag["Key"]: tag["Value"] for tag in existing}
    merged.update(updates)
    return [{"Key": key, "Value": value} for key, value in merged.items()]


class TenantBucketService:
    """Implements ITenantBucketStorage over one boto3 S3 client.

    Every boto3 ClientError or BotoCoreError is raised as StorageOperationException.
    """

    def __init__(
        self,
        region: str,
        *,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        force_path_style: bool = False,
        environment: str = "development",
        ready_timeout_seconds: int = 30,
        client: Any = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            region: Region every tenant bucket is created in.
            endpoint_url: Custom endpoint (MinIO/LocalStack).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            force_path_style: Path-style addressing (needed by most S3-compatible servers).
            environment: Written to the Environment bucket tag.
            ready_timeout_seconds: How long to wait for a new bucket to become visible.
            client: Pre-built S3 client (tests); skips boto3 client construction.
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self.environment = environment
        self.ready_timeout_seconds = ready_timeout_seconds
        if client is None:
            extra: dict[str, Any] = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            if force_path_style:
                extra["config"] = Config(s3={"addressing_style": "path"})
            client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> TenantBucketService:
        secret = settings.s3_secret_key
        return cls(
            settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=secret.get_secret_value() if secret else None,
            force_path_style=settings.s3_force_path_style,
            environment=settings.environment,
            ready_timeout_seconds=settings.bucket_ready_timeout_seconds,
        )

    async def _run[T](self, operation: str, bucket_name: str, fn: Callable[[], T]) -> T:
        """Run a blocking boto3 sequence in a thread; map provider errors."""
        try:
            return await asyncio.to_thread(fn)
        except StorageOperationException:
            raise
        except (ClientError, BotoCoreError) as e:
            logger.warning("S3 %s failed for bucket %s: %s", operation, bucket_name, e)
            raise StorageOperationException(operation, bucket_name, str(e)) from e

    def _exists_sync(self, bucket_name: str) -> bool:
        try:
            self._client.head_bucket(Bucket=bucket_name)
        except ClientError as e:
            if _error_code(e) in _MISSING_BUCKET_CODES:
                return False
            raise
        return True

    async def bucket_exists(self, bucket_name: str) -> bool:
        """Return True if the bucket exists and is reachable."""
        return await self._run(
            "head_bucket", bucket_name, lambda: self._exists_sync(bucket_name)
        )

    async def ensure_tenant_bucket(
        self, bucket_name: str, tenant_id: str, organization_name: str
    ) -> BucketInfo:
        """Create bucket with versioning, lifecycle policy and tags unless it already exists.

        An existing bucket is returned as already_exists and left untouched.
        """
        org_slug = generate_org_slug(organization_name)

        def _ensure() -> str:
            if self._exists_sync(bucket_name):
                return "already_exists"
            params: dict[str, Any] = {"Bucket": bucket_name}
            if self.region != "us-east-1":
                params["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.region
                }
            self._client.create_bucket(**params)
            self._client.get_waiter("bucket_exists").wait(
                Bucket=bucket_name,
                WaiterConfig={"Delay": 1, "MaxAttempts": self.ready_timeout_seconds},
            )
            self._client.put_bucket_versioning(
                Bucket=bucket_name,
                VersioningConfiguration={"Status": "Enabled"},
            )
            self._client.put_bucket_lifecycle_configuration(
                Bucket=bucket_name,
                LifecycleConfiguration={"Rules": standard_lifecycle_rules()},
            )
            self._client.put_bucket_tagging(
                Bucket=bucket_name,
                Tagging={
                    "TagSet": [
                        {"Key": "TenantId", "Value": tenant_id},
                        {"Key": "OrganisationName", "Value": organization_name[:256]},
                        {"Key": "CreatedAt", "Value": isoformat_utc(utc_now())},
                        {"Key": "Environment", "Value": self.environment},
                        {"Key": "Service", "Value": _SERVICE_TAG},
                    ]
                },
            )
            return "created"

        status = await self._run("create_bucket", bucket_name, _ensure)
        if status == "created":
            logger.info("Created bucket %s for tenant %s", bucket_name, tenant_id)
        else:
            logger.info("Bucket %s already exists for tenant %s", bucket_name, tenant_id)
        return BucketInfo(
            bucket_name=bucket_name, org_slug=org_slug, region=self.region, status=status
        )

    def _delete_batch(self, bucket_name: str, objects: list[dict[str, str]]) -> int:
        deleted = 0
        for start in range(0, len(objects), DELETE_BATCH_SIZE):
            batch = objects[start : start + DELETE_BATCH_SIZE]
            response = self._client.delete_objects(
                Bucket=bucket_name, Delete={"Objects": batch, "Quiet": False}
            )
            errors = response.get("Errors") or []
            if errors:
                first = errors[0]
                raise StorageOperationException(
                    "delete_objects",
                    bucket_name,
                    f"{len(errors)} objects not deleted; first {first.get('Key')}: "
                    f"{first.get('Code')} {first.get('Message')}",
                )
            deleted += len(response.get("Deleted") or batch)
        return deleted

    async def delete_bucket_and_contents(self, bucket_name: str) -> int:
        """Delete every object, version and delete marker, then the bucket; return objects removed."""

        def _delete() -> int:
            deleted = 0
            token: str | None = None
            while True:
                params: dict[str, Any] = {"Bucket": bucket_name}
                if token:
                    params["ContinuationToken"] = token
                page = self._client.list_objects_v2(**params)
                keys = [{"Key": obj["Key"]} for obj in page.get("Contents") or []]
                if keys:
                    deleted += self._delete_batch(bucket_name, keys)
                if not page.get("IsTruncated"):
                    break
                token = page.get("NextContinuationToken")

            key_marker: str | None = None
            version_marker: str | None = None
            while True:
                params = {"Bucket": bucket_name}
                if key_marker:
                    params["KeyMarker"] = key_marker
                if version_marker:
                    params["VersionIdMarker"] = version_marker
                page = self._client.list_object_versions(**params)
                versions = [
                    {"Key": v["Key"], "VersionId": v["VersionId"]}
                    for v in (page.get("Versions") or []) + (page.get("DeleteMarkers") or [])
                ]
                if versions:
                    self._delete_batch(bucket_name, versions)
                if not page.get("IsTruncated"):
                    break
                key_marker = page.get("NextKeyMarker")
                version_marker = page.get("NextVersionIdMarker")

            self._client.delete_bucket(Bucket=bucket_name)
            return deleted

        deleted = await self._run("delete_bucket", bucket_name, _delete)
        logger.info("Deleted bucket %s (%d objects)", bucket_name, deleted)
        return deleted

    async def schedule_bucket_expiry(
        self, bucket_name: str, retention_days: int, now: datetime
    ) -> datetime:
        """Tag bucket PendingDeletion and expire all content after retention_days.

        The bucket's existing lifecycle rules are replaced by the single expiry
        rule. Returns the date the content becomes eligible for removal.
        """
        now = ensure_utc(now)
        deletion_date = days_from(now, retention_days)

        def _schedule() -> None:
            try:
                current = self._client.get_bucket_tagging(Bucket=bucket_name).get("TagSet", [])
            except ClientError as e:
                if _error_code(e) != "NoSuchTagSet":
                    raise
                current = []
            tags = merge_tags(
                current,
                {
                    "Status": "PendingDeletion",
                    "DeletionScheduled": "true",
                    "DeletionDate": isoformat_utc(deletion_date),
                    "DeletedAt": isoformat_utc(now),
                },
            )
            self._client.put_bucket_tagging(Bucket=bucket_name, Tagging={"TagSet": tags})
            self._client.put_bucket_lifecycle_configuration(
                Bucket=bucket_name,
                LifecycleConfiguration={"Rules": [expiry_lifecycle_rule(retention_days)]},
            )

        await self._run("schedule_bucket_expiry", bucket_name, _schedule)
        logger.info(
            "Bucket %s scheduled for expiry on %s", bucket_name, deletion_date.isoformat()
        )
        return deletion_date

    def bucket_url(self, bucket_name: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{bucket_name}"
        return f"https://{bucket_name}.s3.{self.region}.amazonaws.com"

    async def get_bucket_info(self, bucket_name: str) -> BucketDetails:
        exists = await self.bucket_exists(bucket_name)
        return BucketDetails(
            bucket_name=bucket_name,
            region=self.region,
            exists=exists,
            url=self.bucket_url(bucket_name),
        )

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
        """Write one object with server-side encryption; downloads are served as attachments."""
        disposition_name = file_name.replace('"', "'")

        def _put() -> dict[str, Any]:
            return self._client.put_object(
                Bucket=bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
                ContentDisposition=f'attachment; filename="{disposition_name}"',
                ServerSideEncryption="AES256",
                Metadata=metadata,
            )

        response = await self._run("put_object", bucket_name, _put)
        logger.info("Uploaded %s to bucket %s (%d bytes)", key, bucket_name, len(body))
        return StoredObject(
            bucket_name=bucket_name,
            key=key,
            url=f"{self.bucket_url(bucket_name)}/{key}",
            file_name=file_name,
            file_size=len(body),
            content_type=content_type,
            version_id=response.get("VersionId"),
            etag=response.get("ETag"),
        )

    async def generate_presigned_url(
        self, bucket_name: str, key: str, expires_in: int = 3600
    ) -> str:
        """Time-limited GET URL for one object."""
        return await self._run(
            "generate_presigned_url",
            bucket_name,
            lambda: self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket_name, "Key": key},
                ExpiresIn=expires_in,
            ),
        )

    async def delete_object(
        self, bucket_name: str, key: str, version_id: str | None = None
    ) -> None:
        """Delete one object, or one version of it when version_id is given.

        Without version_id a versioned bucket keeps the data behind a delete marker.
        """
        params: dict[str, Any] = {"Bucket": bucket_name, "Key": key}
        if version_id:
            params["VersionId"] = version_id
        await self._run(
            "delete_object", bucket_name, lambda: self._client.delete_object(**params)
        )
        logger.info("Deleted %s from bucket %s (version %s)", key, bucket_name, version_id)
