"""API handles for talking to a UAA server.

An :class:`API` bundles two ``httpx.AsyncClient`` objects: one that signs
every request with the session's access token (renewing it when it
expires) and one that sends requests as-is, for the token endpoint and
other unauthenticated calls.

Build one with the constructor matching your credentials:

| Constructor | Grant | Token renewal |
|-------------|-------|---------------|
| `with_token` | caller-supplied token | none |
| `with_client_credentials` | client_credentials | re-run the grant |
| `with_password_credentials` | password | re-run the grant |
| `with_authorization_code` | authorization_code | refresh token, if issued |
| `with_refresh_token` | refresh_token | refresh token rotation |

Example:
    ```python
    from uaa_client import TokenFormat, with_client_credentials

    async with await with_client_credentials(
        "uaa.example.com", "", "admin", "adminsecret", TokenFormat.JWT
    ) as api:
        response = await api.authenticated_client.get(str(api.target_url) + "/Users")
    ```
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import httpx

from uaa_client.auth.endpoint import TokenEndpoint
from uaa_client.auth.exceptions import CredentialNotFoundError
from uaa_client.auth.grants import (
    AuthorizationCode,
    ClientCredentials,
    Grant,
    PasswordCredentials,
    RefreshToken,
    StaticToken,
)
from uaa_client.auth.token import Token, TokenFormat, utcnow
from uaa_client.config import UAASettings
from uaa_client.target import authorize_url, resolve_target, token_url
from uaa_client.transport import (
    BearerTokenTransport,
    TokenRefreshTransport,
    VerboseLoggingTransport,
    build_authenticated_transport,
    create_base_transport,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
ZONE_ID_HEADER = "X-Identity-Zone-Id"

TimeoutTypes = float | httpx.Timeout | None


@dataclass(frozen=True)
class API:
    """A client to the UAA API.

    Attributes:
        authenticated_client: Sends every request with the current access token.
        unauthenticated_client: Sends requests without credentials.
        target_url: Normalized base URL of the UAA server.
        zone_id: Identity zone; sent as X-Identity-Zone-Id by the
            authenticated client when non-empty.
        skip_ssl_validation: Whether TLS certificates are left unverified.
        verbose: Whether requests and responses are logged.
    """

    authenticated_client: httpx.AsyncClient = field(repr=False)
    unauthenticated_client: httpx.AsyncClient = field(repr=False)
    target_url: httpx.URL
    zone_id: str = ""
    skip_ssl_validation: bool = False
    verbose: bool = False
    authenticated_transport: BearerTokenTransport | TokenRefreshTransport | None = field(
        default=None, repr=False, compare=False
    )

    @property
    def token_url(self) -> httpx.URL:
        return token_url(self.target_url)

    @property
    def authorize_url(self) -> httpx.URL:
        return authorize_url(self.target_url)

    @property
    def token(self) -> Token | None:
        """The token the authenticated client currently presents."""
        if self.authenticated_transport is None:
            return None
        return self.authenticated_transport.token

    async def aclose(self) -> None:
        """Release the connections of both clients."""
        await self.authenticated_client.aclose()
        await self.unauthenticated_client.aclose()

    async def __aenter__(self) -> "API":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def _base_transport(
    transport: httpx.AsyncBaseTransport | None,
    *,
    skip_ssl_validation: bool,
    verbose: bool,
) -> httpx.AsyncBaseTransport:
    base = transport if transport is not None else create_base_transport(skip_ssl_validation=skip_ssl_validation)
    if verbose:
        base = VerboseLoggingTransport(wrapped_transport=base)
    return base


def _zone_headers(zone_id: str) -> dict[str, str]:
    return {ZONE_ID_HEADER: zone_id} if zone_id else {}


def with_token(
    target: str,
    zone_id: str,
    token: Token,
    *,
    skip_ssl_validation: bool = False,
    verbose: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], datetime] = utcnow,
    timeout: TimeoutTypes = DEFAULT_TIMEOUT,
) -> API:
    """Build an API that presents the given token on every request.

    The token is never refreshed; once it expires the server will reject it.

    Raises:
        InvalidTokenError: If the access token is empty or already expired.
        InvalidTargetError: If the target cannot be parsed.
    """
    StaticToken(token).validate(clock())
    target_url = resolve_target(target)

    authenticated_transport = build_authenticated_transport(
        _base_transport(transport, skip_ssl_validation=skip_ssl_validation, verbose=verbose),
        token=token,
    )
    return API(
        authenticated_client=httpx.AsyncClient(
            transport=authenticated_transport,
            headers=_zone_headers(zone_id),
            timeout=timeout,
        ),
        unauthenticated_client=httpx.AsyncClient(
            transport=_base_transport(transport, skip_ssl_validation=skip_ssl_validation, verbose=verbose),
            timeout=timeout,
        ),
        target_url=target_url,
        zone_id=zone_id,
        skip_ssl_validation=skip_ssl_validation,
        verbose=verbose,
        authenticated_transport=authenticated_transport,
    )


async def connect_with_grant(
    target: str,
    zone_id: str,
    grant: Grant,
    *,
    token_format: TokenFormat = TokenFormat.OPAQUE,
    skip_ssl_validation: bool = False,
    verbose: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], datetime] = utcnow,
    expiry_margin: timedelta = timedelta(0),
    timeout: TimeoutTypes = DEFAULT_TIMEOUT,
) -> API:
    """Build an API from any grant, performing its initial token exchange.

    Nothing is returned unless the exchange succeeds; on failure the
    unauthenticated client is closed before the error propagates.

    Raises:
        InvalidTargetError: If the target cannot be parsed.
        TokenExchangeError: If the token endpoint rejects the grant.
    """
    target_url = resolve_target(target)

    unauthenticated_client = httpx.AsyncClient(
        transport=_base_transport(transport, skip_ssl_validation=skip_ssl_validation, verbose=verbose),
        timeout=timeout,
    )
    endpoint = TokenEndpoint(
        unauthenticated_client,
        token_url(target_url),
        token_format=token_format,
        clock=clock,
    )

    try:
        token = await grant.acquire_initial_token(endpoint)
    except BaseException:
        await unauthenticated_client.aclose()
        raise

    authenticated_transport = build_authenticated_transport(
        _base_transport(transport, skip_ssl_validation=skip_ssl_validation, verbose=verbose),
        token=token,
        grant=grant,
        endpoint=endpoint,
        expiry_margin=expiry_margin,
    )
    logger.debug(f"Connected to {target_url} using {grant.grant_type} grant (zone: {zone_id or 'default'})")

    return API(
        authenticated_client=httpx.AsyncClient(
            transport=authenticated_transport,
            headers=_zone_headers(zone_id),
            timeout=timeout,
        ),
        unauthenticated_client=unauthenticated_client,
        target_url=target_url,
        zone_id=zone_id,
        skip_ssl_validation=skip_ssl_validation,
        verbose=verbose,
        authenticated_transport=authenticated_transport,
    )


async def with_client_credentials(
    target: str,
    zone_id: str,
    client_id: str,
    client_secret: str,
    token_format: TokenFormat = TokenFormat.OPAQUE,
    **options,
) -> API:
    """Build an API that uses the client credentials grant.

    Keyword options are those of :func:`connect_with_grant`.
    """
    grant = ClientCredentials(client_id=client_id, client_secret=client_secret)
    return await connect_with_grant(target, zone_id, grant, token_format=token_format, **options)


async def with_password_credentials(
    target: str,
    zone_id: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
    token_format: TokenFormat = TokenFormat.OPAQUE,
    **options,
) -> API:
    """Build an API that uses the password credentials grant."""
    grant = PasswordCredentials(
        client_id=client_id,
        client_secret=client_secret,
        username=username,
        password=password,
    )
    return await connect_with_grant(target, zone_id, grant, token_format=token_format, **options)


async def with_authorization_code(
    target: str,
    zone_id: str,
    client_id: str,
    client_secret: str,
    code: str,
    skip_ssl_validation: bool = False,
    token_format: TokenFormat = TokenFormat.OPAQUE,
    *,
    redirect_uri: str | None = None,
    **options,
) -> API:
    """Build an API by exchanging an authorization code.

    The code comes from the interactive ``/oauth/authorize`` redirect,
    which happens outside this library.
    """
    grant = AuthorizationCode(
        client_id=client_id,
        client_secret=client_secret,
        code=code,
        redirect_uri=redirect_uri,
    )
    return await connect_with_grant(
        target,
        zone_id,
        grant,
        token_format=token_format,
        skip_ssl_validation=skip_ssl_validation,
        **options,
    )


async def with_refresh_token(
    target: str,
    zone_id: str,
    client_id: str,
    client_secret: str,
    refresh_token: str,
    skip_ssl_validation: bool = False,
    token_format: TokenFormat = TokenFormat.OPAQUE,
    **options,
) -> API:
    """Build an API from an existing refresh token.

    Raises:
        InvalidRefreshTokenError: If the refresh token is empty or malformed.
    """
    grant = RefreshToken(client_id=client_id, client_secret=client_secret, refresh_token=refresh_token)
    return await connect_with_grant(
        target,
        zone_id,
        grant,
        token_format=token_format,
        skip_ssl_validation=skip_ssl_validation,
        **options,
    )


async def connect(settings: UAASettings, **options) -> API:
    """Build an API from resolved settings.

    The grant is chosen from what the settings carry: a refresh token
    first, then username and password, then client credentials alone.

    Raises:
        CredentialNotFoundError: If no client id is configured.
    """
    if not settings.client_id:
        raise CredentialNotFoundError("A UAA client id is required", env_var_name="UAA_CLIENT_ID")

    client_secret = settings.client_secret or ""
    grant: Grant
    if settings.refresh_token:
        grant = RefreshToken(settings.client_id, client_secret, settings.refresh_token)
    elif settings.username and settings.password:
        grant = PasswordCredentials(settings.client_id, client_secret, settings.username, settings.password)
    else:
        grant = ClientCredentials(settings.client_id, client_secret)

    options.setdefault("skip_ssl_validation", settings.skip_ssl_validation)
    options.setdefault("verbose", settings.verbose)
    return await connect_with_grant(
        settings.target,
        settings.zone_id,
        grant,
        token_format=settings.token_format,
        **options,
    )
