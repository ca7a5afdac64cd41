"""Organization repository. Returns application DTOs."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.tenant import OrganizationResult
from app.domain.exceptions import DuplicateNameException, OrganizationNotFoundException
from app.infrastructure.persistence.models.organization import Organization
from app.infrastructure.persistence.repositories.base import BaseRepository, execute


def _organization_to_result(o: Organization) -> OrganizationResult:
    return OrganizationResult(
        id=o.id,
        name=o.name,
        email=o.email,
        phone=o.phone,
        is_active=o.is_active,
        tenant_id=o.tenant_id,
    )


class OrganizationRepository(BaseRepository[Organization]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Organization)

    async def get_by_id(self, organization_id: str) -> OrganizationResult | None:
        org = await self.get_entity(organization_id)
        return _organization_to_result(org) if org else None

    async def get_by_name(self, name: str) -> OrganizationResult | None:
        result = await execute(
            self.db,
            select(Organization).where(Organization.name == name),
            "get organization by name",
        )
        org = result.scalar_one_or_none()
        return _organization_to_result(org) if org else None

    async def create_organization(
        self, name: str, email: str | None, phone: str | None
    ) -> OrganizationResult:
        """Create organization; raise DuplicateNameException on unique name violation."""
        org = Organization(name=name, email=email, phone=phone, is_active=True)
        created = await self.add(org, lambda: DuplicateNameException(name))
        return _organization_to_result(created)

    async def attach_tenant(
        self, organization_id: str, tenant_id: str
    ) -> OrganizationResult:
        org = await self.get_entity(organization_id)
        if org is None:
            raise OrganizationNotFoundException(organization_id)
        org.tenant_id = tenant_id
        return _organization_to_result(await self.save(org))
