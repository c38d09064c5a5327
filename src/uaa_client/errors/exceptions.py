"""Structured exceptions for UAA client errors."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from uaa_client.errors.models import OAuthErrorDetail


class UAAError(Exception):
    """Base exception for all uaa_client errors."""

    pass


class InvalidTargetError(UAAError, ValueError):
    """Raised when a target string cannot be parsed as a UAA URL."""

    def __init__(self, message: str, target: str | None = None):
        super().__init__(message)
        self.target = target


class InvalidTokenError(UAAError, ValueError):
    """Raised when a static token is empty or already expired."""

    pass


class InvalidRefreshTokenError(UAAError, ValueError):
    """Raised when a refresh token grant is given an empty or malformed token."""

    pass


class TokenExchangeError(UAAError):
    """Raised when the token endpoint rejects a grant or returns an unusable body.

    Attributes:
        grant_type: The OAuth2 grant type that was attempted.
        status_code: HTTP status of the token endpoint response, if one was received.
        response: The token endpoint response, if one was received.
        error_detail: Parsed OAuth2 error body, if the server sent one.
    """

    def __init__(
        self,
        message: str,
        grant_type: str | None = None,
        status_code: int | None = None,
        response: "httpx.Response | None" = None,
        error_detail: "OAuthErrorDetail | None" = None,
    ):
        super().__init__(message)
        self.grant_type = grant_type
        self.status_code = status_code
        self.response = response
        self.error_detail = error_detail


class TokenRefreshError(TokenExchangeError):
    """Raised to the request that triggered a failed token refresh."""

    pass
