"""Plan repository. Returns application DTOs."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.tenant import PlanResult
from app.infrastructure.persistence.models.plan import Plan
from app.infrastructure.persistence.repositories.base import BaseRepository, execute

DEFAULT_PLAN_NAME = "Basic Plan"


def _plan_to_result(p: Plan) -> PlanResult:
    return PlanResult(
        id=p.id,
        name=p.name,
        tier=p.tier,
        price=Decimal(p.price),
        billing_cycle=p.billing_cycle,
        is_default=p.is_default,
        is_active=p.is_active,
        max_users=p.max_users,
        max_documents=p.max_documents,
        max_sites=p.max_sites,
        max_buildings=p.max_buildings,
        max_storage_gb=p.max_storage_gb,
    )


class PlanRepository(BaseRepository[Plan]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Plan)

    async def get_by_id(self, plan_id: str) -> PlanResult | None:
        plan = await self.get_entity(plan_id)
        return _plan_to_result(plan) if plan else None

    async def get_or_create_default(self) -> PlanResult:
        """Return the default plan; create the zero-cost Basic Plan when none exists."""
        result = await execute(
            self.db,
            select(Plan).where(Plan.is_default.is_(True)).order_by(Plan.created_at).limit(1),
            "get default plan",
        )
        plan = result.scalar_one_or_none()
        if plan is None:
            plan = await self.add(
                Plan(
                    name=DEFAULT_PLAN_NAME,
                    tier="basic",
                    price=Decimal("0"),
                    billing_cycle="monthly",
                    is_default=True,
                    is_active=True,
                )
            )
        return _plan_to_result(plan)
