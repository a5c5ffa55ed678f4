"""Storage account key resolution."""

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

from .config import ObjectStoreConfig
from .exceptions import StorageConfigError

log = logging.getLogger(__name__)


def get_storage_account_key(config: ObjectStoreConfig) -> str:
    """Return the storage account key named by ``storage-account-key-env-var``.

    When ``credentials-file`` is configured, that dotenv file is read first
    (without touching ``os.environ``) and the process environment second.

    Raises:
        StorageConfigError: If the credentials file is missing or the variable
            is unset or empty in every source.
    """
    env_var = config.storage_account_key_env_var
    file_values: dict[str, str | None] = {}

    if config.credentials_file:
        path = Path(config.credentials_file).expanduser()
        if not path.is_file():
            raise StorageConfigError(f"Credentials file not found: {path}")
        file_values = dotenv_values(path)
        log.debug("Loaded %d entries from credentials file %s", len(file_values), path)

    key = file_values.get(env_var) or os.getenv(env_var)
    if not key or not key.strip():
        raise StorageConfigError(f"No storage account key found in environment variable {env_var}")
    return key.strip()
