from legaldesk.platform.identity.client import (
    IdentityProvider,
    IdentityProviderError,
    IdentityUser,
    InMemoryIdentityProvider,
    SupabaseAdminClient,
    get_identity_provider,
)

__all__ = [
    "IdentityProvider",
    "IdentityProviderError",
    "IdentityUser",
    "InMemoryIdentityProvider",
    "SupabaseAdminClient",
    "get_identity_provider",
]
