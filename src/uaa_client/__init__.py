"""UAA Client - authenticated HTTP clients for Cloud Foundry UAA servers.

This library builds httpx clients that carry a valid bearer token on
every request:
- One constructor per OAuth2 grant (static token, client credentials,
  password, authorization code, refresh token)
- Composable transport layers (token renewal, header injection, logging)
- Single-flight token refresh shared by concurrent requests
- Multi-source credential resolution (value → env → .env → default)

Example:
    ```python
    from uaa_client import TokenFormat, with_password_credentials

    api = await with_password_credentials(
        "uaa.example.com",
        "",
        "cf",
        "",
        "admin",
        "password",
        TokenFormat.JWT,
    )
    response = await api.authenticated_client.get(f"{api.target_url}/userinfo")
    ```
"""

from uaa_client.auth import Token, TokenFormat
from uaa_client.client import (
    API,
    connect,
    connect_with_grant,
    with_authorization_code,
    with_client_credentials,
    with_password_credentials,
    with_refresh_token,
    with_token,
)
from uaa_client.config import UAASettings, load_settings
from uaa_client.errors import (
    InvalidRefreshTokenError,
    InvalidTargetError,
    InvalidTokenError,
    TokenExchangeError,
    TokenRefreshError,
    UAAError,
)
from uaa_client.target import resolve_target, url_with_path

__version__ = "0.1.0"

__all__ = [
    "API",
    "InvalidRefreshTokenError",
    "InvalidTargetError",
    "InvalidTokenError",
    "Token",
    "TokenExchangeError",
    "TokenFormat",
    "TokenRefreshError",
    "UAAError",
    "UAASettings",
    "__version__",
    "connect",
    "connect_with_grant",
    "load_settings",
    "resolve_target",
    "url_with_path",
    "with_authorization_code",
    "with_client_credentials",
    "with_password_credentials",
    "with_refresh_token",
    "with_token",
]
