"""Access tokens and token formats.

A :class:`Token` is what the UAA token endpoint hands back: an opaque or
JWT access token, its type, an optional refresh token and an optional
absolute expiry. Tokens are immutable; a refresh produces a new one.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

DEFAULT_TOKEN_TYPE = "bearer"

# Fields consumed by Token itself; everything else lands in Token.extra
_TOKEN_FIELDS = frozenset({"access_token", "token_type", "refresh_token", "expires_in"})


def utcnow() -> datetime:
    """Default clock: the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class TokenFormat(StrEnum):
    """Format of the access tokens UAA should mint, sent as ``token_format``."""

    OPAQUE = "opaque"
    JWT = "jwt"


@dataclass(frozen=True)
class Token:
    """An OAuth2 access token.

    A token with no ``expiry`` never expires. Naive ``expiry`` datetimes are
    taken to be UTC.

    Attributes:
        access_token: The credential sent in the Authorization header.
        token_type: Authorization scheme, "bearer" unless the server says otherwise.
        refresh_token: Refresh token for the refresh_token grant, if issued.
        expiry: Absolute expiry time, or None for a non-expiring token.
        extra: Remaining response fields (scope, jti, id_token, ...).
    """

    access_token: str = field(repr=False)
    token_type: str = DEFAULT_TOKEN_TYPE
    refresh_token: str | None = field(default=None, repr=False)
    expiry: datetime | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.expiry is not None and self.expiry.tzinfo is None:
            object.__setattr__(self, "expiry", self.expiry.replace(tzinfo=UTC))

    @classmethod
    def from_response(cls, data: Mapping[str, Any], *, received_at: datetime) -> "Token":
        """Build a token from a token endpoint JSON body.

        ``expires_in`` is converted to an absolute expiry relative to
        ``received_at``; a missing or zero ``expires_in`` yields a token
        with no expiry.

        Raises:
            ValueError: If ``access_token`` is missing or empty, or
                ``expires_in`` is not a number or is out of range.
        """
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("token response has no access_token")

        expiry = None
        expires_in = data.get("expires_in")
        if expires_in is not None:
            try:
                seconds = int(expires_in)
            except (TypeError, ValueError):
                raise ValueError(f"token response has a non-numeric expires_in: {expires_in!r}") from None
            except OverflowError:
                raise ValueError(f"token response has an out-of-range expires_in: {expires_in!r}") from None
            if seconds != 0:
                try:
                    expiry = received_at + timedelta(seconds=seconds)
                except OverflowError:
                    raise ValueError(f"token response has an out-of-range expires_in: {expires_in!r}") from None

        return cls(
            access_token=access_token,
            token_type=data.get("token_type") or DEFAULT_TOKEN_TYPE,
            refresh_token=data.get("refresh_token") or None,
            expiry=expiry,
            extra={k: v for k, v in data.items() if k not in _TOKEN_FIELDS},
        )

    @property
    def authorization_header(self) -> str:
        """Value for the ``Authorization`` request header."""
        return f"{self.token_type or DEFAULT_TOKEN_TYPE} {self.access_token}"

    def is_expired(self, now: datetime | None = None, margin: timedelta = timedelta(0)) -> bool:
        """Whether the token is expired at ``now``, treating ``margin`` before expiry as expired."""
        if self.expiry is None:
            return False
        if now is None:
            now = utcnow()
        return now >= self.expiry - margin

    def is_valid(self, now: datetime | None = None) -> bool:
        """Whether the token can be sent at ``now``: non-empty and unexpired."""
        return bool(self.access_token) and not self.is_expired(now)

    def with_refresh_token_fallback(self, refresh_token: str | None) -> "Token":
        """Keep ``refresh_token`` when the server did not rotate it."""
        if self.refresh_token or not refresh_token:
            return self
        return replace(self, refresh_token=refresh_token)
