"""Tests for API handle construction."""

import logging
from datetime import timedelta

import httpx
import pytest

from uaa_client import (
    API,
    InvalidRefreshTokenError,
    InvalidTargetError,
    InvalidTokenError,
    Token,
    TokenExchangeError,
    TokenFormat,
    with_authorization_code,
    with_client_credentials,
    with_password_credentials,
    with_refresh_token,
    with_token,
)
from uaa_client.client import ZONE_ID_HEADER

USERS_URL = "https://uaa.example.com/Users"


async def build_each(kind, target, uaa, clock, **options):
    """Build an API with the named constructor against the fake server."""
    options = {"transport": uaa.transport(), "clock": clock, **options}
    if kind == "token":
        token = Token(access_token="static", expiry=clock.now + timedelta(hours=1))
        return with_token(target, "", token, **options)
    if kind == "client_credentials":
        return await with_client_credentials(target, "", "cid", "secret", **options)
    if kind == "password":
        return await with_password_credentials(target, "", "cf", "", "admin", "pa55", **options)
    if kind == "authorization_code":
        return await with_authorization_code(target, "", "cid", "secret", "code", **options)
    if kind == "refresh_token":
        return await with_refresh_token(target, "", "cid", "secret", "refresh-abc", **options)
    raise ValueError(kind)


async def client_credentials_api(uaa, clock, zone_id=""):
    transport = uaa.transport()
    return await with_client_credentials("uaa.example.com", zone_id, "cid", "secret", transport=transport, clock=clock)


ALL_CONSTRUCTORS = ["token", "client_credentials", "password", "authorization_code", "refresh_token"]


class TestTargetResolution:
    """Test target handling shared by every constructor."""

    @pytest.mark.unit
    @pytest.mark.parametrize("kind", ALL_CONSTRUCTORS)
    async def test_target_without_scheme_becomes_https(self, kind, uaa, clock):
        """Every constructor resolves a bare host to https without a trailing slash."""
        api = await build_each(kind, "uaa.example.com", uaa, clock)

        assert api.target_url.scheme == "https"
        assert str(api.target_url) == "https://uaa.example.com"
        await api.aclose()

    @pytest.mark.unit
    @pytest.mark.parametrize("kind", ALL_CONSTRUCTORS)
    async def test_invalid_target_fails_before_any_exchange(self, kind, uaa, clock):
        """A bad target fails before the token endpoint is contacted."""
        with pytest.raises(InvalidTargetError):
            await build_each(kind, "", uaa, clock)

        assert uaa.token_requests == []

    @pytest.mark.unit
    async def test_endpoint_urls(self, uaa, clock):
        """Token and authorize URLs keep the target's context path."""
        api = await build_each("client_credentials", "https://login.example.com/uaa/", uaa, clock)

        assert str(api.token_url) == "https://login.example.com/uaa/oauth/token"
        assert str(api.authorize_url) == "https://login.example.com/uaa/oauth/authorize"
        assert uaa.token_request_urls == [api.token_url]
        await api.aclose()


class TestWithToken:
    """Test the static token constructor."""

    @pytest.mark.unit
    def test_succeeds_for_unexpired_token(self, uaa, clock):
        """An unexpired static token yields a handle."""
        token = Token(access_token="x", expiry=clock.now + timedelta(hours=1))

        api = with_token("uaa.example.com", "zone1", token, transport=uaa.transport(), clock=clock)

        assert isinstance(api, API)
        assert api.token is token
        assert api.zone_id == "zone1"

    @pytest.mark.unit
    @pytest.mark.parametrize("expiry_offset", [timedelta(hours=1), timedelta(hours=-1)])
    def test_rejects_empty_access_token(self, uaa, clock, expiry_offset):
        """An empty access token is rejected whatever its expiry."""
        token = Token(access_token="", expiry=clock.now + expiry_offset)

        with pytest.raises(InvalidTokenError):
            with_token("uaa.example.com", "", token, transport=uaa.transport(), clock=clock)

    @pytest.mark.unit
    def test_rejects_expired_token(self, uaa, clock):
        """A token expired one second ago is rejected."""
        token = Token(access_token="x", expiry=clock.now - timedelta(seconds=1))

        with pytest.raises(InvalidTokenError):
            with_token("uaa.example.com", "", token, transport=uaa.transport(), clock=clock)

    @pytest.mark.unit
    async def test_sends_token_and_never_refreshes(self, uaa, clock):
        """A static token is sent as-is, even after it expires."""
        token = Token(access_token="x", expiry=clock.now + timedelta(hours=1))
        api = with_token("uaa.example.com", "", token, transport=uaa.transport(), clock=clock)

        async with api:
            await api.authenticated_client.get(USERS_URL)
            clock.advance(hours=2)
            await api.authenticated_client.get(USERS_URL)

        assert uaa.authorization_headers == ["bearer x", "bearer x"]
        assert uaa.token_requests == []


class TestGrantConstructors:
    """Test constructors that talk to the token endpoint."""

    @pytest.mark.unit
    async def test_client_credentials_first_request_carries_token(self, uaa, clock):
        """The first request carries the token from the initial exchange."""
        uaa.queue_token({"access_token": "x", "token_type": "bearer", "expires_in": 3600})

        api = await with_client_credentials(
            "uaa.example.com", "", "cid", "secret", TokenFormat.JWT, transport=uaa.transport(), clock=clock
        )
        async with api:
            await api.authenticated_client.get(USERS_URL)

        assert uaa.authorization_headers == ["bearer x"]
        assert uaa.token_requests[0]["grant_type"] == "client_credentials"
        assert uaa.token_requests[0]["token_format"] == "jwt"

    @pytest.mark.unit
    async def test_password_credentials_refresh_reruns_grant(self, uaa, clock):
        """Password sessions refresh by re-running the password grant."""
        api = await with_password_credentials(
            "uaa.example.com", "", "cf", "", "admin", "pa55", transport=uaa.transport(), clock=clock
        )
        async with api:
            clock.advance(seconds=3601)
            await api.authenticated_client.get(USERS_URL)

        assert [r["grant_type"] for r in uaa.token_requests] == ["password", "password"]
        assert uaa.authorization_headers == ["bearer token-2"]

    @pytest.mark.unit
    async def test_authorization_code_passes_flags(self, uaa, clock):
        """Positional TLS and format flags reach the handle and exchange."""
        api = await with_authorization_code(
            "uaa.example.com",
            "zone1",
            "cid",
            "secret",
            "code",
            True,
            TokenFormat.JWT,
            transport=uaa.transport(),
            clock=clock,
        )

        assert api.skip_ssl_validation is True
        assert uaa.token_requests[0]["response_type"] == "token"
        assert uaa.token_requests[0]["token_format"] == "jwt"
        await api.aclose()

    @pytest.mark.unit
    async def test_exchange_failure_returns_no_handle(self, uaa, clock):
        """A rejected initial exchange raises TokenExchangeError."""
        uaa.queue_token(httpx.Response(401, json={"error": "unauthorized", "error_description": "Bad credentials"}))

        with pytest.raises(TokenExchangeError) as exc_info:
            await with_client_credentials("uaa.example.com", "", "cid", "wrong", transport=uaa.transport(), clock=clock)

        assert exc_info.value.status_code == 401

    @pytest.mark.unit
    async def test_malformed_refresh_token_fails_before_exchange(self, uaa, clock):
        """An empty refresh token fails before any network call."""
        with pytest.raises(InvalidRefreshTokenError):
            await with_refresh_token("uaa.example.com", "", "cid", "secret", "", transport=uaa.transport(), clock=clock)

        assert uaa.token_requests == []


class TestRefreshTokenScenario:
    """End-to-end: refresh token session with rotation across expiry."""

    @pytest.mark.unit
    async def test_rotation_after_expiry(self, uaa, clock):
        """After expiry the rotated refresh token obtains the next access token."""
        uaa.queue_token({"access_token": "tok1", "refresh_token": "refresh-def", "expires_in": 60})
        uaa.queue_token({"access_token": "tok2", "refresh_token": "refresh-ghi", "expires_in": 60})

        api = await with_refresh_token(
            "uaa.example.com",
            "zone1",
            "cid",
            "secret",
            "refresh-abc",
            False,
            TokenFormat.OPAQUE,
            transport=uaa.transport(),
            clock=clock,
        )
        async with api:
            await api.authenticated_client.get(USERS_URL)
            clock.advance(seconds=61)
            await api.authenticated_client.get(USERS_URL)

        assert [r["refresh_token"] for r in uaa.token_requests] == ["refresh-abc", "refresh-def"]
        assert all(r["token_format"] == "opaque" for r in uaa.token_requests)
        assert uaa.authorization_headers == ["bearer tok1", "bearer tok2"]
        assert api.token.refresh_token == "refresh-ghi"


class TestAPIHandle:
    """Test the handle's clients and flags."""

    @pytest.mark.unit
    async def test_zone_header_on_authenticated_client(self, uaa, clock):
        """A non-empty zone id is sent on authenticated requests."""
        api = await client_credentials_api(uaa, clock, "zone1")

        async with api:
            await api.authenticated_client.get(USERS_URL)

        assert uaa.resource_requests[0].headers[ZONE_ID_HEADER] == "zone1"

    @pytest.mark.unit
    async def test_no_zone_header_for_default_zone(self, uaa, clock):
        """The default zone sends no zone header."""
        api = await client_credentials_api(uaa, clock)

        async with api:
            await api.authenticated_client.get(USERS_URL)

        assert ZONE_ID_HEADER not in uaa.resource_requests[0].headers

    @pytest.mark.unit
    async def test_unauthenticated_client_sends_no_credentials(self, uaa, clock):
        """The unauthenticated client sends no Authorization header."""
        api = await client_credentials_api(uaa, clock, "zone1")

        async with api:
            await api.unauthenticated_client.get(USERS_URL)

        assert uaa.authorization_headers == [None]

    @pytest.mark.unit
    async def test_handle_is_immutable(self, uaa, clock):
        """Handle fields cannot be reassigned."""
        api = await client_credentials_api(uaa, clock)

        with pytest.raises(AttributeError):
            api.zone_id = "other"
        await api.aclose()

    @pytest.mark.unit
    async def test_context_manager_closes_clients(self, uaa, clock):
        """Leaving the context closes both clients."""
        api = await client_credentials_api(uaa, clock)

        async with api:
            pass

        assert api.authenticated_client.is_closed
        assert api.unauthenticated_client.is_closed

    @pytest.mark.unit
    async def test_handles_are_independent(self, uaa, clock):
        """Two handles share no token or transport state."""
        first = await client_credentials_api(uaa, clock)
        second = await client_credentials_api(uaa, clock)

        assert first.token.access_token == "token-1"
        assert second.token.access_token == "token-2"
        assert first.authenticated_transport is not second.authenticated_transport
        await first.aclose()
        await second.aclose()

    @pytest.mark.unit
    async def test_verbose_logs_requests(self, uaa, clock, caplog):
        """Verbose handles log requests without leaking tokens."""
        with caplog.at_level(logging.INFO, logger="uaa_client.transport.verbose"):
            api = await with_client_credentials(
                "uaa.example.com", "", "cid", "secret", transport=uaa.transport(), clock=clock, verbose=True
            )
            async with api:
                await api.authenticated_client.get(USERS_URL)

        assert api.verbose is True
        assert "POST https://uaa.example.com/oauth/token" in caplog.text
        assert f"GET {USERS_URL}" in caplog.text
        assert "token-1" not in caplog.text
