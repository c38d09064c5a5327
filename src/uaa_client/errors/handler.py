"""Error handling utilities for token endpoint responses."""

from typing import Any

import httpx

from uaa_client.errors.exceptions import TokenExchangeError
from uaa_client.errors.models import OAuthErrorDetail


def raise_for_token_response(
    response: httpx.Response,
    *,
    grant_type: str,
    error_class: type[TokenExchangeError] = TokenExchangeError,
) -> None:
    """Raise the appropriate exception for a failed token endpoint response.

    Parses the OAuth2 error body if present, otherwise falls back to the
    status code and the start of the response text.

    Args:
        response: HTTP response from the token endpoint
        grant_type: Grant type of the request, recorded on the exception
        error_class: TokenExchangeError for initial grants,
            TokenRefreshError for refreshes

    Raises:
        TokenExchangeError (or the given subclass) for non-2xx responses
    """
    if response.is_success:
        return

    status_code = response.status_code
    error_detail = OAuthErrorDetail.from_response(response)

    if error_detail:
        message = f"HTTP {status_code}: {error_detail.to_exception_message()}"
    else:
        response_text = response.text[:200]
        message = f"HTTP {status_code}: {response_text}" if response_text else f"HTTP {status_code}"

    raise error_class(
        f"Token request ({grant_type}) failed with {message}",
        grant_type=grant_type,
        status_code=status_code,
        response=response,
        error_detail=error_detail,
    )


def decode_token_body(
    response: httpx.Response,
    *,
    grant_type: str,
    error_class: type[TokenExchangeError] = TokenExchangeError,
) -> dict[str, Any]:
    """Decode a successful token endpoint response into a JSON object.

    Raises:
        TokenExchangeError (or the given subclass) if the body is not a JSON object
    """
    try:
        data = response.json()
    except ValueError as e:
        raise error_class(
            f"Token request ({grant_type}) returned a body that is not JSON",
            grant_type=grant_type,
            status_code=response.status_code,
            response=response,
        ) from e

    if not isinstance(data, dict):
        raise error_class(
            f"Token request ({grant_type}) returned {type(data).__name__}, expected a JSON object",
            grant_type=grant_type,
            status_code=response.status_code,
            response=response,
        )

    return data
