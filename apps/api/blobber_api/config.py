from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from blobber_api.providers.errors import ConfigLoadError


DEFAULT_CONFIG_PATH = "configs/dev.yaml"
DEFAULT_API_TOKEN_ENV_VAR = "BLOBBER_API_TOKEN"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class S3Config(_FrozenModel):
    endpoint: str = ""
    region: str = ""
    bucket: str = ""
    use_path_style: bool = False
    secure: bool = True


class GCPConfig(_FrozenModel):
    project_id: str = ""
    endpoint: str = ""
    bucket: str = ""
    credentials_path: str = ""
    operation_timeout: float = 30.0


class AzureConfig(_FrozenModel):
    tenant_id: str = ""
    # e.g. "https://<account_name>.blob.core.windows.net/"
    endpoint: str = ""
    container: str = ""

    @field_validator("endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class AlicloudConfig(_FrozenModel):
    region: str = ""
    bucket: str = ""
    endpoint: str = ""


class AuthConfig(_FrozenModel):
    store_type: str = "env"
    api_token_env_var: str = DEFAULT_API_TOKEN_ENV_VAR
    token_file: str = ""


class AppConfig(_FrozenModel):
    log_level: str = "info"
    host: str = "0.0.0.0"
    port: int = 8080

    blob_provider: str = ""
    s3_config: S3Config = Field(default_factory=S3Config)
    gcp_config: GCPConfig = Field(default_factory=GCPConfig)
    azure_config: AzureConfig = Field(default_factory=AzureConfig)
    alicloud_config: AlicloudConfig = Field(default_factory=AlicloudConfig)

    auth: AuthConfig = Field(default_factory=AuthConfig)

    @field_validator("blob_provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return (value or "").strip().lower()


def _read_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigLoadError(f"Config file not found: {path}") from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigLoadError(f"Failed to read YAML: {path}: {exc}") from exc


def load_config(path: str | Path) -> AppConfig:
    data = _read_yaml(Path(path))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{path}: expected a mapping at the top level")
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid configuration in {path}: {exc}") from exc


def log_level_from_string(level: str | None) -> int:
    return _LOG_LEVELS.get((level or "").strip().lower(), logging.INFO)
