"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.models.document import (
    ApprovalHistory,
    Document,
    DocumentComment,
)
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TenantMixin,
    TenantScopedModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.notification import (
    EmailNotification,
    Notification,
)
from app.infrastructure.persistence.models.organization import Organization
from app.infrastructure.persistence.models.plan import Plan
from app.infrastructure.persistence.models.property import Asset, Building, Floor, Site
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.models.tenant_setting import TenantSetting
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.models.vendor import Vendor

__all__ = [
    "ApprovalHistory",
    "Asset",
    "AuditLog",
    "Building",
    "CuidMixin",
    "Document",
    "DocumentComment",
    "EmailNotification",
    "Floor",
    "Notification",
    "Organization",
    "Plan",
    "Site",
    "Tenant",
    "TenantMixin",
    "TenantScopedModel",
    "TenantSetting",
    "TimestampMixin",
    "User",
    "Vendor",
]
