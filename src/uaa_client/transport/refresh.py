"""Transparent token renewal for authenticated UAA clients.

:class:`TokenRefreshTransport` sits on top of a
:class:`~uaa_client.transport.bearer.BearerTokenTransport`. Before each
request it checks the held token; once the token is expired it obtains a
new one from the grant and swaps it into the bearer transport.

## Single-flight refresh

| Situation | Behavior |
|-----------|----------|
| Token valid | Request forwarded immediately |
| Token expired, no refresh running | Starts one refresh task, waits for it |
| Token expired, refresh running | Waits for the running task, no new exchange |
| Refresh failed | Every waiter gets the same TokenRefreshError; the old token is kept so the next request retries |
| Waiter cancelled (timeout) | Only that waiter stops; the refresh keeps running for the others |

## Example

```python
bearer = BearerTokenTransport(wrapped_transport=httpx.AsyncHTTPTransport(), token=token)
transport = TokenRefreshTransport(
    wrapped_transport=bearer,
    grant=ClientCredentials("admin", "adminsecret"),
    endpoint=endpoint,
)

async with httpx.AsyncClient(transport=transport) as client:
    response = await client.get("https://uaa.example.com/Users")
```
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

import httpx

from uaa_client.auth.endpoint import TokenEndpoint
from uaa_client.auth.grants import Grant
from uaa_client.auth.token import Token
from uaa_client.transport.bearer import BearerTokenTransport

logger = logging.getLogger(__name__)


class TokenRefreshTransport(httpx.AsyncBaseTransport):
    """Transport that renews an expired token before forwarding the request.

    Args:
        wrapped_transport: The bearer transport holding the live token
        grant: Grant used to obtain replacement tokens
        endpoint: Token endpoint the grant talks to
        expiry_margin: Treat the token as expired this long before its
            expiry (default: zero, i.e. refresh at or after expiry)
        clock: Returns the current aware UTC time (default: the endpoint's clock)
    """

    def __init__(
        self,
        *,
        wrapped_transport: BearerTokenTransport,
        grant: Grant,
        endpoint: TokenEndpoint,
        expiry_margin: timedelta = timedelta(0),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.grant = grant
        self.endpoint = endpoint
        self.expiry_margin = expiry_margin
        self._clock = clock or endpoint.clock
        self._refresh_task: asyncio.Task[Token] | None = None

    @property
    def token(self) -> Token:
        return self._wrapped_transport.token

    @property
    def refresh_in_progress(self) -> bool:
        return self._refresh_task is not None

    async def __aenter__(self):
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Ensure a valid token, then forward the request to the bearer transport.

        Raises:
            TokenRefreshError: If the token was expired and could not be renewed.
        """
        await self.ensure_valid_token()
        return await self._wrapped_transport.handle_async_request(request)

    async def ensure_valid_token(self) -> Token:
        """Return a token that is valid now, refreshing it at most once concurrently.

        Raises:
            TokenRefreshError: If a refresh was needed and failed.
        """
        token = self.token
        if not token.is_expired(self._clock(), self.expiry_margin):
            return token

        if self._refresh_task is None:
            logger.info(f"Access token expired at {token.expiry}, refreshing via {self.grant.grant_type}")
            self._refresh_task = asyncio.create_task(self._refresh(token))
            self._refresh_task.add_done_callback(self._log_refresh_outcome)

        # shield: a cancelled waiter must not cancel the refresh others wait on
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self, expired: Token) -> Token:
        try:
            token = await self.grant.refresh(self.endpoint, expired)
            self._wrapped_transport.token = token
            return token
        finally:
            self._refresh_task = None

    def _log_refresh_outcome(self, task: "asyncio.Task[Token]") -> None:
        if task.cancelled():
            logger.warning("Token refresh was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Token refresh failed: {exc}")
        else:
            logger.info(f"Access token refreshed (expires: {task.result().expiry})")
