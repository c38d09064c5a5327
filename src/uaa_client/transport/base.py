"""Base network transport shared by every UAA client."""

import httpx

MAX_CONNECTIONS = 100
MAX_KEEPALIVE_CONNECTIONS = 100
KEEPALIVE_EXPIRY = 90.0


def create_base_transport(*, skip_ssl_validation: bool = False) -> httpx.AsyncHTTPTransport:
    """Create the network transport at the bottom of a UAA transport stack.

    Args:
        skip_ssl_validation: Disable TLS certificate verification.

    Returns:
        A pooled transport; idle connections are released after 90 seconds.
    """
    return httpx.AsyncHTTPTransport(
        verify=not skip_ssl_validation,
        limits=httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY,
        ),
    )
