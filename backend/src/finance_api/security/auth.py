"""Authentication: resolve the current user of a request.

The finance API does not issue credentials itself. An ``IdentityProvider``
stored on ``app.state.identity_provider`` turns a request into a
``CurrentUser``, or None when the request is anonymous.
"""

import logging
from typing import Annotated, Protocol
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, Request, status

from finance_api.config import Settings
from finance_api.models.domain.user import CurrentUser

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Source of the current user for a request."""

    async def current_user(self, request: Request) -> CurrentUser | None:
        """Return the authenticated user, or None if there is none."""
        ...


class StaticIdentityProvider:
    """Always resolves to the same user. Used by scripts and tests."""

    def __init__(self, user: CurrentUser | None) -> None:
        self.user = user

    async def current_user(self, request: Request) -> CurrentUser | None:
        return self.user


class RemoteIdentityProvider:
    """Resolves bearer tokens against the hosted authentication service.

    The service answers ``GET {auth_url}/user`` with the user's ``id``,
    ``phone`` and ``email`` for a valid access token.
    """

    def __init__(
        self,
        auth_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteIdentityProvider":
        """Build a provider from application settings.

        Raises:
            ValueError: If no authentication service is configured
        """
        if not settings.auth_url:
            raise ValueError("AUTH_URL must be set to authenticate requests")
        return cls(settings.auth_url, settings.auth_api_key, settings.auth_timeout_seconds)

    async def current_user(self, request: Request) -> CurrentUser | None:
        """Look up the user behind the request's bearer token.

        Args:
            request: Incoming request

        Returns:
            Current user, None if the token is missing or rejected
        """
        authorization = request.headers.get("authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.auth_url}/user", headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Authentication service unreachable: {type(e).__name__}")
            return None

        if response.status_code != 200:
            logger.debug(f"Authentication service rejected token: {response.status_code}")
            return None

        try:
            data = response.json()
            user_id = UUID(str(data.get("id")))
        except (ValueError, AttributeError):
            logger.warning("Authentication service returned a user without a valid id")
            return None

        return CurrentUser(
            id=user_id,
            phone=data.get("phone") or None,
            email=data.get("email") or None,
        )


def get_identity_provider(request: Request) -> IdentityProvider:
    """Get the identity provider configured on the application."""
    return request.app.state.identity_provider


async def get_current_user(
    request: Request,
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> CurrentUser | None:
    """Get the current user, None for anonymous requests."""
    return await provider.current_user(request)


async def require_user(
    current_user: Annotated[CurrentUser | None, Depends(get_current_user)],
) -> CurrentUser:
    """Require an authenticated user.

    Raises:
        HTTPException: If the request is anonymous
    """
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return current_user
