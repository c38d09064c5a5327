"""Testing utilities for code built on uaa_client.

- ``FakeUAA``: a scripted token endpoint plus resource server, served
  through ``httpx.MockTransport``, that records every request
- ``FakeClock``: a manually advanced clock for simulating token expiry

Example:
    ```python
    from uaa_client import with_client_credentials
    from uaa_client.testing import FakeClock, FakeUAA


    async def test_refreshes_after_expiry():
        uaa = FakeUAA()
        clock = FakeClock()
        api = await with_client_credentials(
            "uaa.example.com", "", "cid", "secret", transport=uaa.transport(), clock=clock
        )
        clock.advance(seconds=3601)
        await api.authenticated_client.get("https://uaa.example.com/Users")
        assert len(uaa.token_requests) == 2
    ```
"""

import asyncio
import itertools
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import parse_qsl

import httpx

TokenReply = Mapping[str, Any] | httpx.Response


class FakeClock:
    """Clock returning a fixed aware UTC time until advanced."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward; takes ``timedelta`` keyword arguments."""
        self.now += timedelta(**kwargs)
        return self.now


class FakeUAA:
    """Scripted UAA server for ``httpx.MockTransport``.

    POSTs to ``/oauth/token`` pop the next reply from the token queue
    (a JSON mapping or a ready-made response). When the queue is empty a
    fresh ``token-<n>`` bearer token valid for an hour is issued. Any other
    request is answered with ``resource_response`` (200 ``{}`` by default).

    Attributes:
        token_requests: Decoded form bodies of every token request, in order.
        token_request_urls: URLs of every token request, in order.
        resource_requests: Every non-token request, in order.
        token_gate: When set, token requests wait for the event before
            answering, which keeps a refresh in flight.
    """

    def __init__(
        self,
        token_replies: list[TokenReply] | None = None,
        *,
        resource_response: httpx.Response | None = None,
    ) -> None:
        self._token_replies: list[TokenReply] = list(token_replies or [])
        self._counter = itertools.count(1)
        self.resource_response = resource_response
        self.token_requests: list[dict[str, str]] = []
        self.token_request_urls: list[httpx.URL] = []
        self.resource_requests: list[httpx.Request] = []
        self.token_gate: asyncio.Event | None = None

    def queue_token(self, reply: TokenReply) -> None:
        self._token_replies.append(reply)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def authorization_headers(self) -> list[str | None]:
        """The Authorization header of every resource request, in order."""
        return [request.headers.get("Authorization") for request in self.resource_requests]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/oauth/token"):
            return await self._handle_token_request(request)

        self.resource_requests.append(request)
        if self.resource_response is not None:
            return self.resource_response
        return httpx.Response(200, json={})

    async def _handle_token_request(self, request: httpx.Request) -> httpx.Response:
        self.token_requests.append(dict(parse_qsl(request.content.decode())))
        self.token_request_urls.append(request.url)

        if self.token_gate is not None:
            await self.token_gate.wait()

        if self._token_replies:
            reply = self._token_replies.pop(0)
        else:
            reply = {"access_token": f"token-{next(self._counter)}", "token_type": "bearer", "expires_in": 3600}

        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=dict(reply))


__all__ = ["FakeClock", "FakeUAA"]
