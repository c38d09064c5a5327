"""Error taxonomy and OAuth2 error body handling for UAA clients."""

from uaa_client.errors.exceptions import (
    InvalidRefreshTokenError,
    InvalidTargetError,
    InvalidTokenError,
    TokenExchangeError,
    TokenRefreshError,
    UAAError,
)
from uaa_client.errors.handler import decode_token_body, raise_for_token_response
from uaa_client.errors.models import OAuthErrorDetail

__all__ = [
    "InvalidRefreshTokenError",
    "InvalidTargetError",
    "InvalidTokenError",
    "OAuthErrorDetail",
    "TokenExchangeError",
    "TokenRefreshError",
    "UAAError",
    "decode_token_body",
    "raise_for_token_response",
]
