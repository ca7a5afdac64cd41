"""DTOs for tenant object-storage buckets."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BucketInfo:
    """Outcome of ensuring a tenant bucket exists.

    status is "created" for a new bucket, "already_exists" when the bucket was
    found and left untouched.
    """

    bucket_name: str
    org_slug: str
    region: str
    status: str

    @property
    def newly_created(self) -> bool:
        return self.status == "created"


@dataclass(frozen=True)
class StorageDeletionResult:
    """Outcome of disposing of a tenant bucket during deletion."""

    success: bool
    message: str
    bucket_name: str | None = None
    objects_deleted: int = 0
    deletion_date: datetime | None = None
    error: str | None = None


@dataclass(frozen=True)
class StoredObject:
    """An object written to a tenant bucket."""

    bucket_name: str
    key: str
    url: str
    file_name: str
    file_size: int
    content_type: str
    version_id: str | None = None
    etag: str | None = None

    @property
    def file_extension(self) -> str:
        _, dot, extension = self.file_name.rpartition(".")
        return extension.lower() if dot else ""


@dataclass(frozen=True)
class BucketDetails:
    """Where a tenant's bucket lives and whether it exists."""

    bucket_name: str
    region: str
    exists: bool
    url: str
