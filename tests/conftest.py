"""Shared fixtures: an in-memory stand-in for the Azure blob service client."""

from urllib.parse import quote

import pytest
from azure.core.exceptions import HttpResponseError, ResourceExistsError, ResourceNotFoundError

from backup_blob_store.storage.azure_store import AzureObjectStore

ACCOUNT_KEY = "base64secret"


def make_http_error(status_code: int, message: str = "error", cls=HttpResponseError) -> HttpResponseError:
    error = cls(message=message)
    error.status_code = status_code
    return error


def not_found(message: str = "The specified blob does not exist.") -> ResourceNotFoundError:
    return make_http_error(404, message, cls=ResourceNotFoundError)


class FakeBlobProperties:
    def __init__(self, name: str, size: int):
        self.name = name
        self.size = size


class FakeBlobPrefix:
    def __init__(self, name: str):
        self.name = name


class FakePaged:
    """Mimics ItemPaged: iterable, and pageable through by_page()."""

    def __init__(self, items, page_size: int, fail_on_page: int | None = None, error=None):
        self._items = list(items)
        self._page_size = page_size
        self._fail_on_page = fail_on_page
        self._error = error

    def by_page(self):
        for number, start in enumerate(range(0, len(self._items), self._page_size), start=1):
            if self._fail_on_page == number:
                raise self._error
            yield iter(self._items[start:start + self._page_size])

    def __iter__(self):
        for page in self.by_page():
            yield from page


class FakeDownloader:
    def __init__(self, data: bytes, chunk_size: int, error=None):
        self._data = data
        self._chunk_size = chunk_size
        self._error = error
        self.size = len(data)

    def chunks(self):
        for start in range(0, len(self._data), self._chunk_size):
            yield self._data[start:start + self._chunk_size]
            if self._error is not None:
                raise self._error


class FakeBlobClient:
    def __init__(self, service: "FakeBlobServiceClient", container: str, blob: str):
        self._service = service
        self.container_name = container
        self.blob_name = blob

    @property
    def url(self) -> str:
        return f"{self._service.url}/{self.container_name}/{quote(self.blob_name)}"

    def _blobs(self) -> dict:
        return self._service.containers.setdefault(self.container_name, {})

    def upload_blob(self, data, blob_type=None, overwrite=False, **kwargs):
        self._service.record("upload_blob", self.container_name, self.blob_name, blob_type=blob_type, overwrite=overwrite)
        if not overwrite and self.blob_name in self._blobs():
            raise make_http_error(409, "The specified blob already exists.", cls=ResourceExistsError)
        if isinstance(data, (bytes, bytearray)):
            content = bytes(data)
        elif hasattr(data, "read"):
            content = data.read()
        else:
            content = b"".join(data)
        self._blobs()[self.blob_name] = content

    def get_blob_properties(self, **kwargs):
        self._service.record("get_blob_properties", self.container_name, self.blob_name)
        if self.blob_name not in self._blobs():
            raise not_found()
        return FakeBlobProperties(self.blob_name, len(self._blobs()[self.blob_name]))

    def download_blob(self, **kwargs):
        self._service.record("download_blob", self.container_name, self.blob_name)
        if self.blob_name not in self._blobs():
            raise not_found()
        return FakeDownloader(
            self._blobs()[self.blob_name],
            self._service.chunk_size,
            error=self._service.chunk_error,
        )

    def delete_blob(self, delete_snapshots=None, **kwargs):
        self._service.record("delete_blob", self.container_name, self.blob_name, delete_snapshots=delete_snapshots)
        if self.blob_name not in self._blobs():
            raise not_found()
        del self._blobs()[self.blob_name]


class FakeContainerClient:
    def __init__(self, service: "FakeBlobServiceClient", container: str):
        self._service = service
        self.container_name = container

    def _names(self) -> list[str]:
        return sorted(self._service.containers.get(self.container_name, {}))

    def list_blobs(self, name_starts_with=None, **kwargs):
        self._service.record("list_blobs", self.container_name, None, name_starts_with=name_starts_with)
        blobs = self._service.containers.get(self.container_name, {})
        service_prefix = None if self._service.ignore_prefix else name_starts_with
        items = [
            FakeBlobProperties(name, len(blobs[name]))
            for name in self._names()
            if name.startswith(service_prefix or "")
        ]
        return FakePaged(
            items,
            self._service.page_size,
            fail_on_page=self._service.fail_on_page,
            error=self._service.page_error,
        )

    def walk_blobs(self, name_starts_with=None, delimiter="/", **kwargs):
        self._service.record("walk_blobs", self.container_name, None, name_starts_with=name_starts_with, delimiter=delimiter)
        prefix = name_starts_with or ""
        items = []
        seen = set()
        for name in self._names():
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            if delimiter in rest:
                group = prefix + rest.split(delimiter, 1)[0] + delimiter
                if group not in seen:
                    seen.add(group)
                    items.append(FakeBlobPrefix(group))
            else:
                items.append(FakeBlobProperties(name, 0))
        return FakePaged(items, self._service.page_size)


class FakeBlobServiceClient:
    """In-memory blob service with small pages and injectable failures."""

    def __init__(self):
        self.url = None
        self.credential = None
        self.client_kwargs = {}
        self.containers: dict[str, dict[str, bytes]] = {}
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}
        self.page_size = 2
        self.chunk_size = 4
        self.chunk_error = None
        self.fail_on_page = None
        self.page_error = None
        self.ignore_prefix = False

    def __call__(self, account_url=None, credential=None, **kwargs):
        self.url = account_url
        self.credential = credential
        self.client_kwargs = kwargs
        return self

    def record(self, operation: str, container: str, blob: str | None, **kwargs):
        self.calls.append((operation, container, blob, kwargs))
        if operation in self.failures:
            raise self.failures[operation]

    def fail(self, operation: str, error: Exception):
        self.failures[operation] = error

    def get_blob_client(self, container: str, blob: str) -> FakeBlobClient:
        return FakeBlobClient(self, container, blob)

    def get_container_client(self, container: str) -> FakeContainerClient:
        return FakeContainerClient(self, container)


@pytest.fixture()
def fake_service(monkeypatch):
    service = FakeBlobServiceClient()
    monkeypatch.setattr("backup_blob_store.storage.azure_store.BlobServiceClient", service)
    monkeypatch.setattr("backup_blob_store.storage.azure_store.BlobPrefix", FakeBlobPrefix)
    return service


@pytest.fixture()
def store_config(monkeypatch):
    monkeypatch.setenv("KEY", ACCOUNT_KEY)
    return {
        "storage-account": "acct1",
        "storage-account-key-env-var": "KEY",
        "subscription-id": "sub1",
        "resource-group": "rg1",
    }


@pytest.fixture()
def store(fake_service, store_config):
    object_store = AzureObjectStore()
    object_store.init(store_config)
    return object_store


@pytest.fixture()
def http_error():
    return make_http_error
