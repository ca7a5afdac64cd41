"""Tests for tenant bucket naming (slug and full bucket name)."""

import re

import pytest

from app.shared.utils.bucket_naming import (
    MAX_BUCKET_NAME_LENGTH,
    generate_bucket_name,
    generate_org_slug,
)

_VALID_BUCKET_NAME = re.compile(r"^[a-z0-9][a-z0-9-]{1,61}[a-z0-9]$")


@pytest.mark.parametrize(
    ("name", "slug"),
    [
        ("Acme Pty Ltd", "acme-pty-ltd"),
        ("  Smith & Sons (Holdings)  ", "smith-sons-holdings"),
        ("Multi   space---name", "multi-space-name"),
        ("UPPER lower 123", "upper-lower-123"),
        ("!!!", ""),
    ],
)
def test_generate_org_slug(name: str, slug: str) -> None:
    assert generate_org_slug(name) == slug


def test_bucket_name_is_prefix_slug_tenant_id() -> None:
    name = generate_bucket_name("fulq-org", "Acme Pty Ltd", "ckx1abc")
    assert name == "fulq-org-acme-pty-ltd-ckx1abc"


def test_bucket_name_is_deterministic() -> None:
    """Same organization and tenant always map to the same bucket."""
    first = generate_bucket_name("fulq-org", "Acme Pty Ltd", "t1")
    second = generate_bucket_name("fulq-org", "Acme Pty Ltd", "t1")
    assert first == second


def test_bucket_name_differs_per_tenant() -> None:
    assert generate_bucket_name("fulq-org", "Acme", "t1") != generate_bucket_name(
        "fulq-org", "Acme", "t2"
    )


def test_long_organization_name_is_truncated_to_s3_limit() -> None:
    """Only the slug is shortened; prefix and tenant id stay intact."""
    tenant_id = "clxyz1234567890abcdefghij"
    name = generate_bucket_name("fulq-org", "Extremely Long Organisation Name " * 5, tenant_id)
    assert len(name) <= MAX_BUCKET_NAME_LENGTH
    assert name.startswith("fulq-org-extremely-long")
    assert name.endswith(f"-{tenant_id}")
    assert _VALID_BUCKET_NAME.fullmatch(name)
    assert "--" not in name


def test_organization_name_without_usable_characters_falls_back() -> None:
    assert generate_bucket_name("fulq-org", "???", "t1") == "fulq-org-org-t1"


def test_tenant_id_is_lowercased() -> None:
    assert generate_bucket_name("fulq-org", "Acme", "ABC123") == "fulq-org-acme-abc123"


def test_one_character_of_room_still_fits_the_limit() -> None:
    prefix = "a" * 32
    tenant_id = "t" * 28
    name = generate_bucket_name(prefix, "Acme Pty Ltd", tenant_id)
    assert name == f"{prefix}-a-{tenant_id}"
    assert len(name) == MAX_BUCKET_NAME_LENGTH


@pytest.mark.parametrize(
    ("prefix", "tenant_id"),
    [("a" * 32, "t" * 29), ("fulq-org", "t" * 60), ("p" * 70, "t1")],
)
def test_no_room_for_a_slug_raises(prefix: str, tenant_id: str) -> None:
    with pytest.raises(ValueError, match="no room"):
        generate_bucket_name(prefix, "Acme", tenant_id)
