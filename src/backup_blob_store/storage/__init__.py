"""Object store abstraction with an Azure Blob Storage backend."""

from .azure_store import AzureObjectStore
from .base import ObjectStore
from .config import ObjectStoreConfig, load_config
from .exceptions import (
    StorageConfigError,
    StorageConnectionError,
    StorageError,
    StorageNotFoundError,
    StorageNotInitializedError,
    StoragePermissionError,
)
from .streams import BlobReader

__all__ = [
    "AzureObjectStore",
    "BlobReader",
    "ObjectStore",
    "ObjectStoreConfig",
    "load_config",
    "StorageError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "StorageConnectionError",
    "StorageConfigError",
    "StorageNotInitializedError",
]
