"""Tokens, grants and credential resolution for UAA clients.

This module provides:
- The Token model and TokenFormat enumeration
- One grant class per supported OAuth2 flow
- TokenEndpoint, which performs grant exchanges against /oauth/token
- Multi-source credential resolution (value → env → .env → default)

Example:
    ```python
    from uaa_client.auth import ClientCredentials, TokenEndpoint

    endpoint = TokenEndpoint(client, token_url)
    token = await ClientCredentials("admin", "adminsecret").acquire_initial_token(endpoint)
    ```
"""

from uaa_client.auth.credentials import CredentialResolver
from uaa_client.auth.endpoint import TokenEndpoint
from uaa_client.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)
from uaa_client.auth.grants import (
    AuthorizationCode,
    ClientCredentials,
    Grant,
    PasswordCredentials,
    RefreshToken,
    StaticToken,
)
from uaa_client.auth.token import Token, TokenFormat

__all__ = [
    "AuthorizationCode",
    "ClientCredentials",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "Grant",
    "PasswordCredentials",
    "RefreshToken",
    "StaticToken",
    "Token",
    "TokenEndpoint",
    "TokenFormat",
]
