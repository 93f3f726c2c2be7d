from __future__ import annotations

import logging

from blobber_api.config import AppConfig
from blobber_api.providers.alicloud_blob import AlicloudBlobStoreProvider, new_alicloud_client
from blobber_api.providers.azure_blob import AzureBlobStoreProvider, new_azure_client
from blobber_api.providers.base import BlobStoreProvider
from blobber_api.providers.credentials import (
    CredentialsResolver,
    JSONFileCredentialsResolver,
    env_alicloud_credentials,
    env_azure_credentials,
    env_gcp_credentials,
    env_s3_credentials,
)
from blobber_api.providers.errors import UnsupportedProviderError
from blobber_api.providers.gcs_blob import GCSBlobStoreProvider, new_gcs_client
from blobber_api.providers.s3_blob import S3BlobStoreProvider, new_s3_client

_logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("s3", "gcp", "azure", "alicloud")


def gcp_credentials_resolver(config: AppConfig) -> CredentialsResolver:
    if config.gcp_config.credentials_path:
        return JSONFileCredentialsResolver(config.gcp_config.credentials_path)
    return env_gcp_credentials()


def get_blob_store_provider(config: AppConfig, logger: logging.Logger | None = None) -> BlobStoreProvider:
    """
    Returns the BlobStoreProvider selected by `config.blob_provider`.

    Credentials are resolved exactly once here. Any failure (missing credentials, empty
    bucket, unknown provider) propagates to the caller and is meant to abort startup.
    """
    provider = config.blob_provider
    _logger.debug("Initializing backend store provider=%s", provider)

    if provider == "s3":
        client = new_s3_client(config.s3_config, env_s3_credentials())
        return S3BlobStoreProvider(config.s3_config.bucket, client, logger)

    if provider == "gcp":
        client = new_gcs_client(config.gcp_config, gcp_credentials_resolver(config))
        return GCSBlobStoreProvider(
            config.gcp_config.bucket,
            client,
            logger,
            timeout=config.gcp_config.operation_timeout,
        )

    if provider == "azure":
        client = new_azure_client(config.azure_config, env_azure_credentials())
        return AzureBlobStoreProvider(config.azure_config.container, client, logger)

    if provider == "alicloud":
        client = new_alicloud_client(config.alicloud_config, env_alicloud_credentials())
        return AlicloudBlobStoreProvider(config.alicloud_config.bucket, client, logger)

    raise UnsupportedProviderError(provider)
