"""Identity provider clients."""

from app.infrastructure.external.identity.auth0_provider import (
    Auth0IdentityProvider,
    DisabledIdentityProvider,
    create_identity_provider,
)

__all__ = [
    "Auth0IdentityProvider",
    "DisabledIdentityProvider",
    "create_identity_provider",
]
