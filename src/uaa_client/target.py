"""Target URL resolution for UAA servers.

Turns the host strings users type (``uaa.example.com``,
``localhost:8080``, ``https://login.example.com/uaa/``) into a normalized
base URL, and joins endpoint paths onto it.

Example:
    ```python
    from uaa_client.target import resolve_target, token_url

    target = resolve_target("uaa.example.com")
    str(target)  # "https://uaa.example.com"
    str(token_url(target))  # "https://uaa.example.com/oauth/token"
    ```
"""

import httpx

from uaa_client.errors.exceptions import InvalidTargetError

DEFAULT_SCHEME = "https"
SUPPORTED_SCHEMES = frozenset(["http", "https"])

TOKEN_PATH = "/oauth/token"
AUTHORIZE_PATH = "/oauth/authorize"


def resolve_target(target: str) -> httpx.URL:
    """Resolve a user-supplied target into a normalized base URL.

    The result always has a scheme (``https`` when none was given), never
    has a query string or fragment, and never ends with a slash.

    Args:
        target: A bare host, ``host:port``, or full URL.

    Returns:
        The normalized base URL.

    Raises:
        InvalidTargetError: If the target is empty, cannot be parsed, has no
            host, or uses a scheme other than http/https.
    """
    if not isinstance(target, str) or not target.strip():
        raise InvalidTargetError("Target must be a non-empty host name or URL", target=target)

    candidate = target.strip()
    if "://" not in candidate:
        candidate = f"{DEFAULT_SCHEME}://{candidate}"

    try:
        url = httpx.URL(candidate)
    except httpx.InvalidURL as e:
        raise InvalidTargetError(f"Invalid target {target!r}: {e}", target=target) from e

    if url.scheme not in SUPPORTED_SCHEMES:
        raise InvalidTargetError(
            f"Invalid target {target!r}: unsupported scheme {url.scheme!r}",
            target=target,
        )
    if not url.host:
        raise InvalidTargetError(f"Invalid target {target!r}: missing host", target=target)

    return _build_url(url, _encoded_path(url).rstrip("/"))


def url_with_path(url: httpx.URL, path: str) -> httpx.URL:
    """Join ``path`` onto ``url`` without duplicate slashes.

    Any query string or fragment on ``url`` is dropped.
    """
    base_path = _encoded_path(url).rstrip("/")
    return _build_url(url, f"{base_path}/{path.lstrip('/')}")


def token_url(url: httpx.URL) -> httpx.URL:
    return url_with_path(url, TOKEN_PATH)


def authorize_url(url: httpx.URL) -> httpx.URL:
    return url_with_path(url, AUTHORIZE_PATH)


def _encoded_path(url: httpx.URL) -> str:
    # raw_path keeps %-escapes, so an encoded "?" or "#" stays part of the path
    return url.raw_path.decode("ascii").partition("?")[0]


def _build_url(url: httpx.URL, path: str) -> httpx.URL:
    # userinfo is dropped so credentials never leak into the base URL
    return url.copy_with(userinfo=b"", path=path, query=None, fragment=None)
