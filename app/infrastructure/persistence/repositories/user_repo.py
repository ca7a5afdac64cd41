"""User repository with password hashing. Interface methods return application DTOs."""

from __future__ import annotations

import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import UserResult
from app.domain.exceptions import DatabaseOperationException, DuplicateEmailException
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import BaseRepository, execute
from app.infrastructure.security.password import get_password_hash


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult (no password)."""
    return UserResult(
        id=u.id,
        tenant_id=u.tenant_id,
        name=u.name,
        email=u.email,
        is_active=u.is_active,
        role_ids=tuple(u.role_ids or ()),
        identity_provider_id=u.identity_provider_id,
    )


class UserRepository(BaseRepository[User]):
    """User repository. Passwords are hashed off the event loop."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> UserResult | None:
        result = await execute(
            self.db,
            select(User).where(func.lower(User.email) == email.lower()),
            "get app_user by email",
        )
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None

    async def create_user(
        self,
        tenant_id: str,
        name: str,
        email: str,
        password: str,
        role_ids: tuple[str, ...],
    ) -> UserResult:
        """Create active user; raise DuplicateEmailException on unique constraint violation."""
        hashed = await asyncio.to_thread(get_password_hash, password)
        user = User(
            tenant_id=tenant_id,
            name=name,
            email=email.lower(),
            hashed_password=hashed,
            is_active=True,
            role_ids=list(role_ids),
        )
        created = await self.add(user, lambda: DuplicateEmailException(email))
        return _user_to_result(created)

    async def set_identity_provider_id(
        self, user_id: str, identity_provider_id: str
    ) -> UserResult:
        user = await self.get_entity(user_id)
        if user is None:
            raise DatabaseOperationException(
                "link identity provider", f"user {user_id} not found"
            )
        user.identity_provider_id = identity_provider_id
        return _user_to_result(await self.save(user))

    async def count_active(self, tenant_id: str) -> int:
        result = await execute(
            self.db,
            select(func.count())
            .select_from(User)
            .where(User.tenant_id == tenant_id, User.is_active.is_(True)),
            "count active users",
        )
        return int(result.scalar_one())
