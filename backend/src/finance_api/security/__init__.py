"""Security package."""

from finance_api.security.auth import (
    IdentityProvider,
    RemoteIdentityProvider,
    StaticIdentityProvider,
    get_current_user,
    require_user,
)

__all__ = [
    "IdentityProvider",
    "RemoteIdentityProvider",
    "StaticIdentityProvider",
    "get_current_user",
    "require_user",
]
