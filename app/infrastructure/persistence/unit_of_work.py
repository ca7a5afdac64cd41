"""SQLAlchemy unit of work: the lifecycle repositories on one AsyncSession."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    OrganizationRepository,
    PlanRepository,
    TenantRecordRepository,
    TenantRepository,
    UserRepository,
)


class SqlAlchemyUnitOfWork:
    """Implements IUnitOfWork over a single session.

    The session is owned by the caller (request dependency or script); this
    class never closes it.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.organizations = OrganizationRepository(session)
        self.plans = PlanRepository(session)
        self.tenants = TenantRepository(session)
        self.users = UserRepository(session)
        self.audit_logs = AuditLogRepository(session)
        self.records = TenantRecordRepository(session)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit on normal exit; roll back on any exception, a failed commit included, then re-raise."""
        try:
            yield
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
