"""Azure Blob Storage object store."""

import base64
import binascii
import functools
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import ServiceRequestError
from azure.storage.blob import (
    BlobPrefix,
    BlobSasPermissions,
    BlobServiceClient,
    BlobType,
    generate_blob_sas,
)

from .base import ObjectStore, PutBody
from .config import ObjectStoreConfig, load_config
from .credentials import get_storage_account_key
from .exceptions import (
    StorageConfigError,
    StorageConnectionError,
    StorageError,
    StorageNotFoundError,
    StorageNotInitializedError,
    StoragePermissionError,
)
from .streams import BlobReader

log = logging.getLogger(__name__)

_NOT_FOUND = 404
_PERMISSION_DENIED = (401, 403)


def _status_code(error: Exception) -> Optional[int]:
    status = getattr(error, "status_code", None)
    return status if isinstance(status, int) else None


class AzureObjectStore(ObjectStore):
    """Object store backed by the blob service of one Azure storage account.

    The service client is built once by ``init`` and shared by every call
    afterwards. It is never rebuilt or mutated, so a single store can be used
    from several threads at once.
    """

    def __init__(self) -> None:
        self._service_client: Optional[BlobServiceClient] = None
        self._config: Optional[ObjectStoreConfig] = None
        self._account_key: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self._service_client is not None

    def init(self, config: Mapping[str, str]) -> None:
        if self._service_client is not None:
            raise StorageConfigError("Object store is already initialized")

        store_config = load_config(config)
        account_key = get_storage_account_key(store_config)
        credential = self._build_credential(store_config.storage_account, account_key)

        account_url = store_config.account_url
        client_kwargs: dict[str, Any] = {}
        if store_config.block_size_in_bytes:
            client_kwargs["max_block_size"] = store_config.block_size_in_bytes
            client_kwargs["max_single_put_size"] = store_config.block_size_in_bytes

        try:
            service_client = BlobServiceClient(account_url=account_url, credential=credential, **client_kwargs)
        except (TypeError, ValueError) as e:
            raise StorageConfigError(f"Failed to create blob service client for {account_url}: {e}", cause=e) from e

        self._config = store_config
        self._account_key = account_key
        self._service_client = service_client
        log.info("Initialized Azure object store for account %s at %s", store_config.storage_account, account_url)

    def put_object(self, bucket: str, key: str, body: PutBody) -> None:
        service = self._client()
        try:
            blob_client = service.get_blob_client(container=bucket, blob=key)
            blob_client.upload_blob(body, blob_type=BlobType.BLOCKBLOB, overwrite=True)
        except Exception as e:
            raise self._translate_error(e, bucket, key) from e
        log.debug("Uploaded %s/%s", bucket, key)

    def object_exists(self, bucket: str, key: str) -> bool:
        service = self._client()
        try:
            blob_client = service.get_blob_client(container=bucket, blob=key)
            blob_client.get_blob_properties()
        except Exception as e:
            if _status_code(e) == _NOT_FOUND:
                return False
            raise self._translate_error(e, bucket, key) from e
        return True

    def get_object(self, bucket: str, key: str) -> BlobReader:
        service = self._client()
        try:
            blob_client = service.get_blob_client(container=bucket, blob=key)
            downloader = blob_client.download_blob()
        except Exception as e:
            raise self._translate_error(e, bucket, key) from e

        return BlobReader(
            downloader.chunks(),
            translate_error=functools.partial(self._translate_error, bucket=bucket, key=key),
            size=downloader.size,
            name=f"{bucket}/{key}",
        )

    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        service = self._client()
        names: list[str] = []
        try:
            container = service.get_container_client(bucket)
            pages = container.list_blobs(name_starts_with=prefix or None).by_page()
            for page_number, page in enumerate(pages, start=1):
                page_names = [blob.name for blob in page if blob.name.startswith(prefix)]
                names.extend(page_names)
                log.debug("Listed page %d of %s with %d matches", page_number, bucket, len(page_names))
        except Exception as e:
            raise self._translate_error(e, bucket) from e
        return names

    def list_common_prefixes(self, bucket: str, prefix: str, delimiter: str) -> list[str]:
        service = self._client()
        if not delimiter:
            raise ValueError("delimiter must be a non-empty string")

        prefixes: list[str] = []
        try:
            container = service.get_container_client(bucket)
            for item in container.walk_blobs(name_starts_with=prefix or None, delimiter=delimiter):
                if isinstance(item, BlobPrefix):
                    prefixes.append(item.name)
        except Exception as e:
            raise self._translate_error(e, bucket) from e
        return prefixes

    def delete_object(self, bucket: str, key: str) -> None:
        service = self._client()
        try:
            blob_client = service.get_blob_client(container=bucket, blob=key)
            blob_client.delete_blob(delete_snapshots="include")
        except Exception as e:
            raise self._translate_error(e, bucket, key) from e
        log.debug("Deleted %s/%s", bucket, key)

    def create_signed_url(self, bucket: str, key: str, ttl: timedelta) -> str:
        service = self._client()
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        try:
            blob_client = service.get_blob_client(container=bucket, blob=key)
            sas_token = generate_blob_sas(
                account_name=self._config.storage_account,
                container_name=bucket,
                blob_name=key,
                account_key=self._account_key,
                permission=BlobSasPermissions(read=True),
                expiry=datetime.now(timezone.utc) + ttl,
            )
        except Exception as e:
            raise self._translate_error(e, bucket, key) from e
        return f"{blob_client.url}?{sas_token}"

    def _client(self) -> BlobServiceClient:
        if self._service_client is None:
            raise StorageNotInitializedError("Object store is not initialized; call init() first")
        return self._service_client

    @staticmethod
    def _build_credential(account_name: str, account_key: str) -> AzureNamedKeyCredential:
        try:
            base64.b64decode(account_key, validate=True)
            return AzureNamedKeyCredential(account_name, account_key)
        except (binascii.Error, TypeError, ValueError) as e:
            raise StorageConfigError(f"Invalid storage account key for account {account_name}", cause=e) from e

    @staticmethod
    def _translate_error(error: Exception, bucket: str | None = None, key: str | None = None) -> StorageError:
        if isinstance(error, StorageError):
            return error
        status = _status_code(error)
        if status == _NOT_FOUND:
            return StorageNotFoundError(str(error), key=key, bucket=bucket, cause=error)
        if status in _PERMISSION_DENIED:
            return StoragePermissionError(str(error), key=key, bucket=bucket, cause=error)
        if isinstance(error, (ServiceRequestError, ConnectionError)):
            return StorageConnectionError(str(error), key=key, bucket=bucket, cause=error)
        return StorageError(str(error), key=key, bucket=bucket, cause=error)
