"""OAuth2 token endpoint error models."""

from dataclasses import dataclass
from typing import Any

import httpx

STANDARD_FIELDS = frozenset({"error", "error_description", "error_uri"})


@dataclass
class OAuthErrorDetail:
    """OAuth2 error response body.

    See: https://datatracker.ietf.org/doc/html/rfc6749#section-5.2
    """

    error: str  # Error code such as "invalid_grant" or "unauthorized_client"
    error_description: str | None = None  # Human-readable explanation
    error_uri: str | None = None  # URI of a page describing the error

    # Extension members (UAA adds some, e.g. "scope")
    extensions: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "OAuthErrorDetail | None":
        """Parse an OAuth2 error body from a token endpoint response.

        Args:
            response: HTTP response object

        Returns:
            OAuthErrorDetail object or None if the body is not an OAuth2 error
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            # Non-JSON bodies (HTML error pages from proxies, empty bodies)
            return None

        if not isinstance(data, dict) or not isinstance(data.get("error"), str):
            return None

        extensions = {k: v for k, v in data.items() if k not in STANDARD_FIELDS}

        return cls(
            error=data["error"],
            error_description=data.get("error_description"),
            error_uri=data.get("error_uri"),
            extensions=extensions if extensions else None,
        )

    def to_exception_message(self) -> str:
        """Convert the error body to an exception message."""
        message = self.error
        if self.error_description:
            message = f"{message}: {self.error_description}"
        if self.error_uri:
            message = f"{message} (see {self.error_uri})"
        return message
