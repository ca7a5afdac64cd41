"""API v1 router aggregation.

Health checks are public; the tenant lifecycle routes sit under /admin and
require the admin secret (enforced on the tenants router itself).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import health, tenants

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tenants.router, prefix="/admin/tenants", tags=["admin-tenants"])
