"""Pydantic request/response schemas for the admin API."""

from app.schemas.health import HealthResponse, ReadinessErrorResponse
from app.schemas.tenant import (
    DeletionResponse,
    ProvisioningResponse,
    ProvisionTenantRequest,
    SoftDeleteRequest,
    SoftDeleteResponse,
    TenantUsageResponse,
)

__all__ = [
    "DeletionResponse",
    "HealthResponse",
    "ProvisionTenantRequest",
    "ProvisioningResponse",
    "ReadinessErrorResponse",
    "SoftDeleteRequest",
    "SoftDeleteResponse",
    "TenantUsageResponse",
]
