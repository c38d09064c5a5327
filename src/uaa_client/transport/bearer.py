"""Bearer token header injection."""

import httpx

from uaa_client.auth.token import Token


class BearerTokenTransport(httpx.AsyncBaseTransport):
    """Transport that sets ``Authorization: <type> <access_token>`` on every request.

    This is pure header injection: the held token is sent whether or not it
    has expired. Compose it under a TokenRefreshTransport to get renewal.

    Args:
        wrapped_transport: The underlying transport to wrap
        token: The token to present

    Example:
        ```python
        transport = BearerTokenTransport(
            wrapped_transport=httpx.AsyncHTTPTransport(),
            token=Token(access_token="abc"),
        )
        ```
    """

    def __init__(self, *, wrapped_transport: httpx.AsyncBaseTransport, token: Token) -> None:
        self._wrapped_transport = wrapped_transport
        # Replaced only by TokenRefreshTransport, under its single-flight refresh
        self.token = token

    async def __aenter__(self):
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        request.headers["Authorization"] = self.token.authorization_header
        return await self._wrapped_transport.handle_async_request(request)
