"""Persistence repositories. Each returns application DTOs, never ORM instances."""

from app.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.organization_repo import (
    OrganizationRepository,
)
from app.infrastructure.persistence.repositories.plan_repo import PlanRepository
from app.infrastructure.persistence.repositories.tenant_record_repo import (
    RECORD_MODELS,
    TenantRecordRepository,
)
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "RECORD_MODELS",
    "AuditLogRepository",
    "BaseRepository",
    "OrganizationRepository",
    "PlanRepository",
    "TenantRecordRepository",
    "TenantRepository",
    "UserRepository",
]
