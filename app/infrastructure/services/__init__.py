"""Infrastructure services: provisioning collaborators without a backing service."""

from app.infrastructure.services.placeholders import (
    InMemoryRoleProvisioner,
    PlaceholderDropdownSeeder,
    PlaceholderNotificationService,
    PlaceholderSubscriptionService,
)

__all__ = [
    "InMemoryRoleProvisioner",
    "PlaceholderDropdownSeeder",
    "PlaceholderNotificationService",
    "PlaceholderSubscriptionService",
]
