"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import ActorType, AuditAction, AuditResourceType
from app.shared.utils import (
    ensure_utc,
    generate_bucket_name,
    generate_cuid,
    generate_org_slug,
    utc_now,
)

__all__ = [
    "ActorType",
    "AuditAction",
    "AuditResourceType",
    "generate_bucket_name",
    "generate_cuid",
    "generate_org_slug",
    "utc_now",
    "ensure_utc",
]
