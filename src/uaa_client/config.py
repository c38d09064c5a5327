"""Environment-based configuration for UAA clients.

Settings are read with :class:`~uaa_client.auth.CredentialResolver`, so
each value can come from a keyword argument, the environment or a
``.env`` file:

| Variable | Setting |
|----------|---------|
| `UAA_TARGET` | target (required) |
| `UAA_ZONE_ID` | zone_id |
| `UAA_CLIENT_ID` | client_id |
| `UAA_CLIENT_SECRET` / `UAA_CLIENT_SECRET_FILE` | client_secret |
| `UAA_USERNAME`, `UAA_PASSWORD` | username, password |
| `UAA_REFRESH_TOKEN` | refresh_token |
| `UAA_TOKEN_FORMAT` | token_format (`opaque` or `jwt`) |
| `UAA_SKIP_SSL_VALIDATION` | skip_ssl_validation |
| `UAA_VERBOSE` | verbose |

Example:
    ```python
    from uaa_client import connect, load_settings

    api = await connect(load_settings())
    ```
"""

import logging
from dataclasses import dataclass, field

from uaa_client.auth.credentials import CredentialResolver
from uaa_client.auth.token import TokenFormat

logger = logging.getLogger(__name__)

TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
FALSE_VALUES = frozenset(["0", "false", "no", "off", ""])


@dataclass(frozen=True)
class UAASettings:
    target: str
    zone_id: str = ""
    client_id: str | None = None
    client_secret: str | None = field(default=None, repr=False)
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    refresh_token: str | None = field(default=None, repr=False)
    token_format: TokenFormat = TokenFormat.OPAQUE
    skip_ssl_validation: bool = False
    verbose: bool = False


def parse_bool(value: str | bool | None, *, name: str = "value") -> bool:
    """Parse a boolean setting such as ``UAA_VERBOSE=yes``.

    Raises:
        ValueError: If the value is not a recognized boolean spelling.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def parse_token_format(value: str | TokenFormat | None) -> TokenFormat:
    """Parse ``opaque``/``jwt`` (case-insensitive) into a TokenFormat.

    Raises:
        ValueError: For any other spelling.
    """
    if value is None:
        return TokenFormat.OPAQUE
    if isinstance(value, TokenFormat):
        return value
    try:
        return TokenFormat(value.strip().lower())
    except ValueError:
        choices = ", ".join(f.value for f in TokenFormat)
        raise ValueError(f"Invalid token format {value!r} (expected one of: {choices})") from None


def load_settings(
    resolver: CredentialResolver | None = None,
    *,
    target: str | None = None,
    zone_id: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    username: str | None = None,
    password: str | None = None,
    refresh_token: str | None = None,
    token_format: str | TokenFormat | None = None,
    skip_ssl_validation: bool | None = None,
    verbose: bool | None = None,
) -> UAASettings:
    """Resolve UAA settings; keyword arguments override the environment.

    Raises:
        CredentialNotFoundError: If no target is configured.
        CredentialFileError: If UAA_CLIENT_SECRET_FILE names an unreadable file.
        ValueError: If a boolean or token format setting is malformed.
    """
    resolver = resolver or CredentialResolver()

    secret = resolver.resolve(value=client_secret, env_var_name="UAA_CLIENT_SECRET")
    if secret is None:
        secret_file = resolver.resolve(env_var_name="UAA_CLIENT_SECRET_FILE", mask_in_logs=False)
        if secret_file:
            secret = resolver.resolve_from_file(file_path=secret_file, required=True)

    settings = UAASettings(
        target=resolver.resolve(value=target, env_var_name="UAA_TARGET", required=True, mask_in_logs=False),
        zone_id=resolver.resolve(value=zone_id, env_var_name="UAA_ZONE_ID", default="", mask_in_logs=False),
        client_id=resolver.resolve(value=client_id, env_var_name="UAA_CLIENT_ID", mask_in_logs=False),
        client_secret=secret,
        username=resolver.resolve(value=username, env_var_name="UAA_USERNAME", mask_in_logs=False),
        password=resolver.resolve(value=password, env_var_name="UAA_PASSWORD"),
        refresh_token=resolver.resolve(value=refresh_token, env_var_name="UAA_REFRESH_TOKEN"),
        token_format=parse_token_format(
            token_format
            if token_format is not None
            else resolver.resolve(env_var_name="UAA_TOKEN_FORMAT", mask_in_logs=False)
        ),
        skip_ssl_validation=parse_bool(
            skip_ssl_validation
            if skip_ssl_validation is not None
            else resolver.resolve(env_var_name="UAA_SKIP_SSL_VALIDATION", mask_in_logs=False),
            name="UAA_SKIP_SSL_VALIDATION",
        ),
        verbose=parse_bool(
            verbose if verbose is not None else resolver.resolve(env_var_name="UAA_VERBOSE", mask_in_logs=False),
            name="UAA_VERBOSE",
        ),
    )
    logger.debug(f"Loaded UAA settings for {settings.target} (zone: {settings.zone_id or 'default'})")
    return settings
