"""Client for the UAA ``/oauth/token`` endpoint.

Every grant goes through :meth:`TokenEndpoint.request_token`, which posts
a form-encoded body, attaches the session's ``token_format`` and turns
the JSON reply into a :class:`~uaa_client.auth.token.Token`.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime

import httpx

from uaa_client.auth.token import Token, TokenFormat, utcnow
from uaa_client.errors.exceptions import TokenExchangeError
from uaa_client.errors.handler import decode_token_body, raise_for_token_response

logger = logging.getLogger(__name__)


class TokenEndpoint:
    """Posts grant requests to a UAA token endpoint over an unauthenticated client.

    Args:
        client: Unauthenticated client used for token requests.
        url: Absolute URL of the token endpoint.
        token_format: Format of the tokens to request.
        clock: Returns the current aware UTC time; used to turn
            ``expires_in`` into an absolute expiry.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: httpx.URL,
        *,
        token_format: TokenFormat = TokenFormat.OPAQUE,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.client = client
        self.url = url
        self.token_format = token_format
        self.clock = clock

    async def request_token(
        self,
        params: Mapping[str, str],
        *,
        error_class: type[TokenExchangeError] = TokenExchangeError,
    ) -> Token:
        """Exchange grant parameters for a token.

        Args:
            params: Form fields of the grant, including ``grant_type``.
            error_class: Exception raised on failure; refreshes pass
                TokenRefreshError.

        Returns:
            The token issued by the server.

        Raises:
            TokenExchangeError: (or ``error_class``) on network errors,
                non-2xx responses and malformed bodies.
        """
        grant_type = params.get("grant_type", "unknown")
        form = {**params, "token_format": str(self.token_format)}

        try:
            response = await self.client.post(
                str(self.url),
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise error_class(
                f"Token request ({grant_type}) to {self.url} failed: {e}",
                grant_type=grant_type,
            ) from e

        raise_for_token_response(response, grant_type=grant_type, error_class=error_class)
        data = decode_token_body(response, grant_type=grant_type, error_class=error_class)

        try:
            token = Token.from_response(data, received_at=self.clock())
        except ValueError as e:
            raise error_class(
                f"Token request ({grant_type}) returned an unusable token: {e}",
                grant_type=grant_type,
                status_code=response.status_code,
                response=response,
            ) from e

        logger.debug(f"Obtained {token.token_type} token via {grant_type} from {self.url} (expires: {token.expiry})")
        return token
