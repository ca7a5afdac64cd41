"""Shared enumerations for the tenant lifecycle application.

Cross-cutting enums used by application and infrastructure (audit actions,
actor type). Domain-specific enums (e.g. TenantStatus) live in
app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Who initiated a lifecycle operation."""

    ADMIN = "admin"
    SYSTEM = "system"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit log actions written by the lifecycle services.

    DELETE covers both full and soft deletion; the entry's details carry
    deletion_type ("complete" or "soft").
    """

    TENANT_PROVISIONING_COMPLETED = "tenant_provisioning_completed"
    DELETE = "delete"


class AuditResourceType(_ValuesMixin, str, Enum):
    """Resource types referenced by lifecycle audit entries."""

    TENANT = "tenant"
