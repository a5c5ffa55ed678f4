"""
Configuration for the Azure object store.

The host hands the store a flat mapping of hyphenated string keys. This module
validates that mapping against the known key set and derives the blob service
endpoint for the selected Azure cloud.
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import StorageConfigError

log = logging.getLogger(__name__)

BLOB_URL_TEMPLATE = "https://{account}.blob.{suffix}"

DEFAULT_CLOUD_NAME = "AzurePublicCloud"

CLOUD_ENDPOINT_SUFFIXES = {
    "AzurePublicCloud": "core.windows.net",
    "AzureUSGovernmentCloud": "core.usgovcloudapi.net",
    "AzureChinaCloud": "core.chinacloudapi.cn",
    "AzureGermanCloud": "core.cloudapi.de",
}

# Upper bound for the configurable upload block size.
MAX_BLOCK_SIZE = 100 * 1024 * 1024

REQUIRED_CONFIG_KEYS = (
    "resource-group",
    "storage-account",
    "subscription-id",
    "storage-account-key-env-var",
)


class ObjectStoreConfig(BaseModel):
    """Validated object store configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    resource_group: str = Field(
        alias="resource-group",
        min_length=1,
        description="Resource group owning the storage account",
    )
    storage_account: str = Field(
        alias="storage-account",
        pattern=r"^[a-z0-9]{3,24}$",
        description="Storage account name, used to build the service endpoint",
    )
    subscription_id: str = Field(
        alias="subscription-id",
        min_length=1,
        description="Subscription identifier",
    )
    storage_account_key_env_var: str = Field(
        alias="storage-account-key-env-var",
        min_length=1,
        description="Name of the environment variable holding the account key",
    )
    cloud_name: str = Field(
        default=DEFAULT_CLOUD_NAME,
        alias="cloud-name",
        description="Azure cloud selecting the endpoint suffix",
    )
    block_size_in_bytes: Optional[int] = Field(
        default=None,
        alias="block-size-in-bytes",
        ge=1,
        le=MAX_BLOCK_SIZE,
        description="Block size used when uploading blobs",
    )
    credentials_file: Optional[str] = Field(
        default=None,
        alias="credentials-file",
        min_length=1,
        description="Dotenv file consulted for the account key before the environment",
    )

    @field_validator("cloud_name")
    @classmethod
    def _check_cloud_name(cls, value: str) -> str:
        if value not in CLOUD_ENDPOINT_SUFFIXES:
            supported = ", ".join(sorted(CLOUD_ENDPOINT_SUFFIXES))
            raise ValueError(f"unknown cloud {value!r}, supported: {supported}")
        return value

    @property
    def endpoint_suffix(self) -> str:
        return CLOUD_ENDPOINT_SUFFIXES[self.cloud_name]

    @property
    def account_url(self) -> str:
        return BLOB_URL_TEMPLATE.format(account=self.storage_account, suffix=self.endpoint_suffix)


def load_config(config: Mapping[str, Any]) -> ObjectStoreConfig:
    """Validate a raw config mapping.

    Raises:
        StorageConfigError: If a required key is missing, an unknown key is
            present, or a value is malformed.
    """
    if not isinstance(config, Mapping):
        raise StorageConfigError(f"Object store config must be a mapping, got {type(config).__name__}")

    missing = [key for key in REQUIRED_CONFIG_KEYS if key not in config]
    if missing:
        raise StorageConfigError(f"Missing required config keys: {', '.join(missing)}")

    try:
        validated = ObjectStoreConfig.model_validate(dict(config))
    except ValidationError as e:
        raise StorageConfigError(f"Invalid object store config: {_format_errors(e)}", cause=e) from e

    log.debug(
        "Validated object store config for account %s (subscription %s, resource group %s)",
        validated.storage_account,
        validated.subscription_id,
        validated.resource_group,
    )
    return validated


def _format_errors(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail["loc"]) or "config"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)
