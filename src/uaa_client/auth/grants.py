"""Credential strategies for obtaining UAA access tokens.

Each grant is an immutable dataclass carrying only the fields its OAuth2
flow needs. They all share one interface:

- ``acquire_initial_token(endpoint)`` performs the grant's first exchange
- ``refresh(endpoint, token)`` obtains a replacement for an expired token
- ``supports_refresh`` tells whether ``refresh`` can ever succeed

| Grant | Initial exchange | Refresh |
|-------|------------------|---------|
| `StaticToken` | none | never |
| `ClientCredentials` | client_credentials | re-run the grant |
| `PasswordCredentials` | password | re-run the grant |
| `AuthorizationCode` | authorization_code | refresh_token, if one was issued |
| `RefreshToken` | refresh_token | refresh_token, following rotation |

Example:
    ```python
    grant = ClientCredentials(client_id="admin", client_secret="adminsecret")
    token = await grant.acquire_initial_token(endpoint)
    ```
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar

from uaa_client.auth.token import Token, utcnow
from uaa_client.errors.exceptions import (
    InvalidRefreshTokenError,
    InvalidTokenError,
    TokenExchangeError,
    TokenRefreshError,
)

if TYPE_CHECKING:
    from uaa_client.auth.endpoint import TokenEndpoint


class Grant(ABC):
    """Base class of all credential strategies."""

    grant_type: ClassVar[str]
    supports_refresh: ClassVar[bool] = True

    @abstractmethod
    async def acquire_initial_token(self, endpoint: "TokenEndpoint") -> Token:
        """Obtain the first token of a session.

        Raises:
            TokenExchangeError: If the token endpoint rejects the grant.
        """

    @abstractmethod
    async def refresh(self, endpoint: "TokenEndpoint", token: Token) -> Token:
        """Obtain a replacement for ``token``.

        Raises:
            TokenRefreshError: If no new token can be obtained.
        """


@dataclass(frozen=True)
class StaticToken(Grant):
    """A caller-supplied token that is used as-is and never refreshed."""

    grant_type: ClassVar[str] = "static"
    supports_refresh: ClassVar[bool] = False

    token: Token

    def validate(self, now: datetime | None = None) -> Token:
        """Check the token is usable at ``now``.

        Raises:
            InvalidTokenError: If the access token is empty or already expired.
        """
        if now is None:
            now = utcnow()
        if self.token.is_valid(now):
            return self.token
        if not self.token.access_token:
            raise InvalidTokenError("must supply a valid token: access token is empty")
        raise InvalidTokenError(f"must supply a valid token: token expired at {self.token.expiry}")

    async def acquire_initial_token(self, endpoint: "TokenEndpoint") -> Token:
        return self.validate(endpoint.clock())

    async def refresh(self, endpoint: "TokenEndpoint", token: Token) -> Token:
        raise TokenRefreshError(
            "Static token has expired and cannot be refreshed",
            grant_type=self.grant_type,
        )


@dataclass(frozen=True)
class ClientCredentials(Grant):
    grant_type: ClassVar[str] = "client_credentials"

    client_id: str
    client_secret: str = field(repr=False)

    def _params(self) -> dict[str, str]:
        return {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

    async def acquire_initial_token(self, endpoint: "TokenEndpoint") -> Token:
        return await endpoint.request_token(self._params())

    async def refresh(self, endpoint: "TokenEndpoint", token: Token) -> Token:
        # Client credentials are stateless: a fresh grant always works
        return await endpoint.request_token(self._params(), error_class=TokenRefreshError)


@dataclass(frozen=True)
class PasswordCredentials(Grant):
    grant_type: ClassVar[str] = "password"

    client_id: str
    client_secret: str = field(repr=False)
    username: str
    password: str = field(repr=False)

    def _params(self) -> dict[str, str]:
        return {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "username": self.username,
            "password": self.password,
        }

    async def acquire_initial_token(self, endpoint: "TokenEndpoint") -> Token:
        return await endpoint.request_token(self._params())

    async def refresh(self, endpoint: "TokenEndpoint", token: Token) -> Token:
        return await endpoint.request_token(self._params(), error_class=TokenRefreshError)


async def _refresh_token_grant(
    endpoint: "TokenEndpoint",
    *,
    client_id: str,
    client_secret: str,
    refresh_token: str,
    error_class: type[TokenExchangeError],
) -> Token:
    params = {
        "grant_type": "refresh_token",
        "client_id": client_id,
        "client_secret": client_secret,
        "refresh_token": refresh_token,
    }
    token = await endpoint.request_token(params, error_class=error_class)
    return token.with_refresh_token_fallback(refresh_token)


@dataclass(frozen=True)
class AuthorizationCode(Grant):
    """Exchanges a one-time authorization code obtained from ``/oauth/authorize``."""

    grant_type: ClassVar[str] = "authorization_code"

    client_id: str
    client_secret: str = field(repr=False)
    code: str = field(repr=False)
    redirect_uri: str | None = None

    async def acquire_initial_token(self, endpoint: "TokenEndpoint") -> Token:
        params = {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": self.code,
            "response_type": "token",
        }
        if self.redirect_uri:
            params["redirect_uri"] = self.redirect_uri
        return await endpoint.request_token(params)

    async def refresh(self, endpoint: "TokenEndpoint", token: Token) -> Token:
        if not token.refresh_token:
            raise TokenRefreshError(
                "Token has expired and the server issued no refresh token",
                grant_type=self.grant_type,
            )
        return await _refresh_token_grant(
            endpoint,
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=token.refresh_token,
            error_class=TokenRefreshError,
        )


@dataclass(frozen=True)
class RefreshToken(Grant):
    """Starts a session from an existing refresh token.

    Raises:
        InvalidRefreshTokenError: On construction, if the refresh token is
            empty or contains whitespace.
    """

    grant_type: ClassVar[str] = "refresh_token"

    client_id: str
    client_secret: str = field(repr=False)
    refresh_token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.refresh_token, str) or not self.refresh_token.strip():
            raise InvalidRefreshTokenError("refresh token must not be empty")
        if any(c.isspace() for c in self.refresh_token):
            raise InvalidRefreshTokenError("refresh token must not contain whitespace")

    async def acquire_initial_token(self, endpoint: "TokenEndpoint") -> Token:
        return await _refresh_token_grant(
            endpoint,
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=self.refresh_token,
            error_class=TokenExchangeError,
        )

    async def refresh(self, endpoint: "TokenEndpoint", token: Token) -> Token:
        return await _refresh_token_grant(
            endpoint,
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=token.refresh_token or self.refresh_token,
            error_class=TokenRefreshError,
        )
