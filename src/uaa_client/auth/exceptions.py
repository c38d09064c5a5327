"""Exceptions raised while resolving UAA credentials from the environment.

Example:
    ```python
    from uaa_client.auth.exceptions import CredentialNotFoundError

    if not client_id:
        raise CredentialNotFoundError("UAA client id not found", env_var_name="UAA_CLIENT_ID")
    ```
"""

from uaa_client.errors.exceptions import UAAError


class CredentialError(UAAError):
    """Base exception for credential resolution errors."""

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when a required credential is missing from every source.

    Attributes:
        env_var_name: The environment variable that was checked (if any).
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """Raised when a credential file (e.g. ``UAA_CLIENT_SECRET_FILE``) cannot be read."""

    pass
