"""Credential lookup for UAA settings.

A UAA setting is taken from the first source that has it:
1. A value passed in code
2. An environment variable (``UAA_CLIENT_ID`` and friends)
3. A .env file, which python-dotenv merges into the environment
4. A fallback default

Secrets such as ``UAA_CLIENT_SECRET`` can also live in a file whose path
is given by a ``*_FILE`` variable, the way container platforms mount them.

Example:
    ```python
    from uaa_client.auth import CredentialResolver

    resolver = CredentialResolver()
    client_id = resolver.resolve(env_var_name="UAA_CLIENT_ID", required=True)
    client_secret = resolver.resolve_from_file(env_var_name="UAA_CLIENT_SECRET_FILE")
    ```

Only the source of a setting is logged; secret values show as ``***``.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from uaa_client.auth.exceptions import CredentialFileError, CredentialNotFoundError

logger = logging.getLogger(__name__)

MASK = "***"


def _expand_path(path: str | Path) -> Path:
    return Path(os.path.expanduser(os.path.expandvars(str(path))))


class CredentialResolver:
    """Look up UAA settings across code, environment, .env and defaults.

    Args:
        dotenv_path: .env file to merge into the environment. If None,
            python-dotenv searches upward from the working directory.
        load_dotenv: Skip the .env file entirely when False.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self._dotenv_path = dotenv_path
        if load_dotenv:
            self._load_dotenv()

    def _load_dotenv(self) -> None:
        # python-dotenv never overrides variables already set in the environment
        try:
            found = load_dotenv(dotenv_path=self._dotenv_path)
        except OSError as e:
            logger.warning(f"Could not read .env file: {e}")
        else:
            if found:
                logger.debug("Merged .env file into the environment")

    @staticmethod
    def _lookup(value: str | None, env_var_name: str | None, default: str | None) -> tuple[str | None, str]:
        if value is not None:
            return value, "explicit value"
        if env_var_name and env_var_name in os.environ:
            return os.environ[env_var_name], env_var_name
        if default is not None:
            return default, "default"
        return None, ""

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        mask_in_logs: bool = True,
    ) -> str | None:
        """Return the first available value for a setting.

        Args:
            value: Value passed in code; wins over everything else.
            env_var_name: Environment variable holding the setting.
            default: Used when neither of the above is set.
            required: Raise instead of returning None.
            mask_in_logs: Log ``***`` instead of the value. Turn off only
                for non-secret settings such as the target.

        Raises:
            CredentialNotFoundError: If required and no source has a value.
        """
        result, source = self._lookup(value, env_var_name, default)

        if result is None:
            if required:
                message = "Required UAA setting not found"
                if env_var_name:
                    message += f" (set {env_var_name})"
                raise CredentialNotFoundError(message, env_var_name=env_var_name)
            return None

        logger.debug(f"{env_var_name or 'setting'} taken from {source}: {MASK if mask_in_logs else result}")
        return result

    def resolve_from_file(
        self,
        *,
        file_path: str | Path | None = None,
        env_var_name: str | None = None,
        required: bool = False,
    ) -> str | None:
        """Read a secret from a file, stripped of surrounding whitespace.

        The path is ``file_path`` or, failing that, the value of
        ``env_var_name``. ``~`` and ``$VAR`` are expanded.

        Returns:
            The secret, or None when no path is configured or the file
            cannot be read and ``required`` is False.

        Raises:
            CredentialFileError: If required and the file cannot be read.
        """
        if file_path is None and env_var_name:
            file_path = self.resolve(env_var_name=env_var_name, mask_in_logs=False)

        if not file_path:
            if not required:
                return None
            message = "No credential file configured"
            if env_var_name:
                message += f" (env var '{env_var_name}' not set)"
            raise CredentialFileError(message)

        path = _expand_path(file_path)
        try:
            secret = path.read_text().strip()
        except FileNotFoundError:
            if required:
                raise CredentialFileError(f"Credential file not found: {path}") from None
            logger.debug(f"Credential file not found: {path}")
            return None
        except OSError as e:
            if required:
                raise CredentialFileError(f"Cannot read credential file {path}: {e}") from e
            logger.warning(f"Cannot read credential file {path}: {e}")
            return None

        logger.debug(f"Secret read from {path}: {MASK}")
        return secret
