"""Deterministic tenant bucket naming.

The same (organization name, tenant id) pair always yields the same bucket
name. Provisioning and deletion prefer the name stored on the tenant and only
fall back to this derivation when none is stored.
"""

import re

# S3 bucket names are limited to 63 characters.
MAX_BUCKET_NAME_LENGTH = 63
FALLBACK_SLUG = "org"

_DISALLOWED_CHARS_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_REPEATED_HYPHENS_RE = re.compile(r"-+")


def generate_org_slug(organization_name: str) -> str:
    """Return the lowercase alphanumeric-and-hyphen slug of an organization name.

    Example: "Acme Pty Ltd" -> "acme-pty-ltd".
    """
    slug = organization_name.lower()
    slug = _DISALLOWED_CHARS_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _REPEATED_HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def generate_bucket_name(prefix: str, organization_name: str, tenant_id: str) -> str:
    """Compose ``<prefix>-<slug>-<tenant_id>``.

    The slug is shortened (never the prefix or tenant id) when the full name
    would exceed the S3 limit, and replaced by ``org`` when the organization
    name has no usable characters.

    Raises:
        ValueError: prefix and tenant id leave no room for even a one
            character slug within the limit.
    """
    slug = generate_org_slug(organization_name) or FALLBACK_SLUG
    room = MAX_BUCKET_NAME_LENGTH - len(prefix) - len(tenant_id) - 2
    if room < 1:
        raise ValueError(
            f"Bucket prefix {prefix!r} and tenant id {tenant_id!r} leave no room for "
            f"an organization slug within {MAX_BUCKET_NAME_LENGTH} characters"
        )
    if len(slug) > room:
        slug = slug[:room].rstrip("-") or FALLBACK_SLUG[:room]
    return f"{prefix}-{slug}-{tenant_id.lower()}"
