"""Supabase Auth client that resolves access tokens to users."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from dopamine.domain.errors import StorageError
from dopamine.domain.users import AuthenticatedUser

_UNAUTHORIZED = {httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN}


class IdentityClient(Protocol):
    """Interface for the identity provider."""

    async def get_user(self, access_token: str) -> AuthenticatedUser | None:
        """Return the user for a token, or None when the token is rejected."""

    async def close(self) -> None:
        """Release network resources."""


@dataclass
class HttpxIdentityClient(IdentityClient):
    """HTTPX-backed client for ``/auth/v1/user``."""

    base_url: str
    api_key: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, api_key: str) -> "HttpxIdentityClient":
        """Create an identity client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            http_client=httpx.AsyncClient(),
        )

    async def get_user(self, access_token: str) -> AuthenticatedUser | None:
        try:
            response = await self.http_client.get(
                f"{self.base_url}/auth/v1/user",
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {access_token}",
                },
                timeout=10,
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Identity provider unreachable: {exc}") from exc
        if response.status_code in _UNAUTHORIZED:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(f"Identity provider error: {exc}") from exc
        payload = response.json()
        user_id = payload.get("id")
        if not user_id:
            return None
        return AuthenticatedUser(id=str(user_id), email=payload.get("email"))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
