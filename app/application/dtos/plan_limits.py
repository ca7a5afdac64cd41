"""DTOs for plan ceilings and a tenant's consumption against them."""

from dataclasses import dataclass

from app.application.dtos.tenant import PlanResult

BYTES_PER_GB = 1024**3


def bytes_to_gb(size_bytes: int) -> float:
    """Bytes as GB rounded to two decimals."""
    return round(size_bytes / BYTES_PER_GB, 2)


@dataclass(frozen=True)
class PlanUsage:
    """Current consumption of one tenant.

    plan is None when no ceiling applies: the tenant has no plan, or it is
    inactive or pending deletion.
    """

    tenant_id: str
    plan: PlanResult | None
    users: int
    documents: int
    storage_gb: float
    sites: int
    buildings: int
    floors: int
    assets: int
    vendors: int

    @property
    def limits(self) -> dict[str, int | None]:
        plan = self.plan
        if plan is None:
            return {
                "users": None,
                "documents": None,
                "storage_gb": None,
                "sites": None,
                "buildings": None,
            }
        return {
            "users": plan.max_users,
            "documents": plan.max_documents,
            "storage_gb": plan.max_storage_gb,
            "sites": plan.max_sites,
            "buildings": plan.max_buildings,
        }
