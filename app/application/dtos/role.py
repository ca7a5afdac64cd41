"""DTOs for the tenant administrative role (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoleResult:
    """Administrative role created for a new tenant.

    persisted is False while role storage lives outside this service: the role
    is generated for the run and its id is attached to the admin user.
    """

    id: str
    tenant_id: str
    name: str
    description: str
    operations: tuple[str, ...]
    entity_type: str = "all"
    is_active: bool = True
    persisted: bool = False
