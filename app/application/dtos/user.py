"""DTOs for tenant users (no dependency on ORM)."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AdminUserInput:
    """Initial administrative user requested at provisioning. Password is plaintext input only."""

    name: str
    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class UserResult:
    """User read-model. No password."""

    id: str
    tenant_id: str
    name: str
    email: str
    is_active: bool
    role_ids: tuple[str, ...] = ()
    identity_provider_id: str | None = None


@dataclass(frozen=True)
class IdentityUser:
    """A user as known by the external identity provider."""

    user_id: str
    email: str
    name: str | None = None
    blocked: bool = False
