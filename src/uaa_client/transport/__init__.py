"""Transport layer components for authenticated UAA clients.

Transport layers wrap an httpx async transport and are composed in a
fixed order, outermost first:

    TokenRefreshTransport → BearerTokenTransport → [VerboseLoggingTransport] → base

Modules:
    base: Pooled network transport with the TLS verification toggle
    bearer: Authorization header injection
    refresh: Single-flight renewal of expired tokens
    verbose: Request/response logging for verbose handles

Example:
    ```python
    from uaa_client.transport import build_authenticated_transport, create_base_transport

    transport = build_authenticated_transport(
        create_base_transport(),
        token=token,
        grant=grant,
        endpoint=endpoint,
    )
    ```
"""

from datetime import timedelta

import httpx

from uaa_client.auth.endpoint import TokenEndpoint
from uaa_client.auth.grants import Grant
from uaa_client.auth.token import Token
from uaa_client.transport.base import create_base_transport
from uaa_client.transport.bearer import BearerTokenTransport
from uaa_client.transport.refresh import TokenRefreshTransport
from uaa_client.transport.verbose import VerboseLoggingTransport


def build_authenticated_transport(
    base: httpx.AsyncBaseTransport,
    *,
    token: Token,
    grant: Grant | None = None,
    endpoint: TokenEndpoint | None = None,
    expiry_margin: timedelta = timedelta(0),
) -> BearerTokenTransport | TokenRefreshTransport:
    """Compose the authenticated transport stack over ``base``.

    Grants that cannot refresh (or a missing grant/endpoint) get header
    injection only; all others get a refresher on top.
    """
    bearer = BearerTokenTransport(wrapped_transport=base, token=token)
    if grant is None or endpoint is None or not grant.supports_refresh:
        return bearer
    return TokenRefreshTransport(
        wrapped_transport=bearer,
        grant=grant,
        endpoint=endpoint,
        expiry_margin=expiry_margin,
    )


__all__ = [
    "BearerTokenTransport",
    "TokenRefreshTransport",
    "VerboseLoggingTransport",
    "build_authenticated_transport",
    "create_base_transport",
]
