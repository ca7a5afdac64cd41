"""Shared utilities: datetime, generators, bucket naming."""

from app.shared.utils.bucket_naming import generate_bucket_name, generate_org_slug
from app.shared.utils.datetime import days_from, ensure_utc, isoformat_utc, utc_now
from app.shared.utils.generators import (
    generate_cuid,
    generate_temporary_password,
    generate_transaction_id,
)

__all__ = [
    "generate_bucket_name",
    "generate_org_slug",
    "generate_cuid",
    "generate_temporary_password",
    "generate_transaction_id",
    "utc_now",
    "ensure_utc",
    "days_from",
    "isoformat_utc",
]
