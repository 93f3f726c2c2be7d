from __future__ import annotations

import abc
import hmac
import logging
import os
from pathlib import Path

from .config import AuthConfig

_logger = logging.getLogger(__name__)


class SecretStoreError(Exception):
    """The expected secret could not be read, so no decision can be made."""


class SecretStore(abc.ABC):
    """
    Holds the single shared secret that callers must present.

    `validate_token` returns False on a mismatch and only raises `SecretStoreError`
    when the expected secret cannot be checked at all.
    """

    @abc.abstractmethod
    def validate_token(self, token: str) -> bool:
        pass


def _matches(token: str, expected: str) -> bool:
    # An unset secret must never authorize anyone, including an empty token.
    if not expected or not token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


class EnvSecretStore(SecretStore):
    def __init__(self, env_var: str) -> None:
        if not env_var:
            raise ValueError("env_var must name the variable holding the API token")
        self.env_var = env_var

    def validate_token(self, token: str) -> bool:
        return _matches(token, os.environ.get(self.env_var, ""))


class FileSecretStore(SecretStore):
    """Reads the expected token from a file on every check so rotations need no restart."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def validate_token(self, token: str) -> bool:
        try:
            expected = self.path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            _logger.error("Failed to read API token file %s: %s", self.path, exc)
            raise SecretStoreError(f"cannot read token file {self.path}") from exc
        return _matches(token, expected)


def get_secret_store(config: AuthConfig) -> SecretStore:
    store_type = (config.store_type or "").strip().lower()
    if store_type == "env":
        return EnvSecretStore(config.api_token_env_var)
    if store_type == "file":
        if not config.token_file:
            raise ValueError("auth.token_file is required for the file secret store")
        return FileSecretStore(config.token_file)
    if not store_type:
        raise ValueError("auth store type is not configured")
    raise ValueError(f"unknown auth store type: {config.store_type}")
