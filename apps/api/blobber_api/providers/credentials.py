from __future__ import annotations

import abc
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from blobber_api.providers.errors import NoValidCredentialsError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, repr=False)
class Credentials:
    """
    Authentication material for one backend. Only the fields of the active backend are set.
    """

    # S3-compatible, Alicloud
    access_key_id: str = ""
    secret_access_key: str = ""
    session_token: str = ""

    # GCP
    api_key: str = ""
    credentials_json: bytes = b""

    # Azure
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""

    def __repr__(self) -> str:
        populated = sorted(name for name, value in vars(self).items() if value)
        return f"Credentials(populated={populated})"


class CredentialsResolver(abc.ABC):
    """Produces credentials from an external source, or raises `NoValidCredentialsError`."""

    @abc.abstractmethod
    def resolve(self) -> Credentials:
        pass


class StaticCredentialsResolver(CredentialsResolver):
    def __init__(self, access_key_id: str, secret_access_key: str, session_token: str = "") -> None:
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._session_token = session_token

    def resolve(self) -> Credentials:
        if not self._access_key_id or not self._secret_access_key:
            raise NoValidCredentialsError("static credentials are missing the access key or secret")
        return Credentials(
            access_key_id=self._access_key_id,
            secret_access_key=self._secret_access_key,
            session_token=self._session_token,
        )


class EnvCredentialsResolver(CredentialsResolver):
    """
    Reads credentials from environment variables.

    `required` and `optional` map a `Credentials` field name to the variable holding it.
    Any required variable that is unset or empty fails resolution.
    """

    def __init__(self, required: dict[str, str], optional: dict[str, str] | None = None) -> None:
        if not required:
            raise ValueError("at least one required variable must be configured")
        self.required = dict(required)
        self.optional = dict(optional or {})

    def resolve(self) -> Credentials:
        values: dict[str, str] = {}
        for field, var in self.required.items():
            value = os.environ.get(var, "")
            if not value:
                _logger.error("Required credential variable %s is not set.", var)
                raise NoValidCredentialsError(f"environment variable {var} is empty or unset")
            values[field] = value
        for field, var in self.optional.items():
            values[field] = os.environ.get(var, "")
        return Credentials(**values)


class JSONFileCredentialsResolver(CredentialsResolver):
    """Returns the raw contents of a credentials document (e.g. a GCP service-account key)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path) if path else None

    def resolve(self) -> Credentials:
        if self.path is None:
            raise NoValidCredentialsError("no credentials file configured")
        try:
            data = self.path.read_bytes()
        except OSError as exc:
            _logger.error("Failed to read credentials file %s: %s", self.path, exc)
            raise NoValidCredentialsError(f"credentials file {self.path} is not readable") from exc
        if not data.strip():
            raise NoValidCredentialsError(f"credentials file {self.path} is empty")
        return Credentials(credentials_json=data)


def env_s3_credentials() -> EnvCredentialsResolver:
    return EnvCredentialsResolver(
        required={
            "access_key_id": "AWS_ACCESS_KEY_ID",
            "secret_access_key": "AWS_SECRET_ACCESS_KEY",
        },
        optional={"session_token": "AWS_SESSION_TOKEN"},
    )


def env_alicloud_credentials() -> EnvCredentialsResolver:
    return EnvCredentialsResolver(
        required={
            "access_key_id": "OSS_ACCESS_KEY_ID",
            "secret_access_key": "OSS_SECRET_ACCESS_KEY",
        },
    )


def env_azure_credentials() -> EnvCredentialsResolver:
    return EnvCredentialsResolver(
        required={
            "client_id": "AZURE_CLIENT_ID",
            "client_secret": "AZURE_CLIENT_SECRET",
        },
        optional={"tenant_id": "AZURE_TENANT_ID"},
    )


def env_gcp_credentials() -> EnvCredentialsResolver:
    return EnvCredentialsResolver(required={"api_key": "GCP_API_KEY"})
