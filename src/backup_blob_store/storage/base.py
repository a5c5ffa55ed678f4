"""Abstract base class for backup object stores."""

import io
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import BinaryIO, Iterable, Mapping, Union

PutBody = Union[bytes, BinaryIO, Iterable[bytes]]


class ObjectStore(ABC):
    """Backend-agnostic interface the backup pipeline drives.

    A store starts uninitialized. ``init`` must succeed exactly once before any
    other method is called; until then every operation raises
    ``StorageNotInitializedError``.
    """

    @abstractmethod
    def init(self, config: Mapping[str, str]) -> None:
        """Validate the config mapping and build the client. Raises StorageConfigError."""

    @abstractmethod
    def put_object(self, bucket: str, key: str, body: PutBody) -> None:
        """Create or overwrite ``bucket/key`` with the bytes of ``body``."""

    @abstractmethod
    def object_exists(self, bucket: str, key: str) -> bool:
        """Return True if the object exists, False only when the service reports 404."""

    @abstractmethod
    def get_object(self, bucket: str, key: str) -> io.RawIOBase:
        """Open a single-pass reader over the whole object."""

    @abstractmethod
    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        """Return every key in ``bucket`` starting with ``prefix``."""

    @abstractmethod
    def list_common_prefixes(self, bucket: str, prefix: str, delimiter: str) -> list[str]:
        """Return the distinct prefixes one ``delimiter`` segment below ``prefix``."""

    @abstractmethod
    def delete_object(self, bucket: str, key: str) -> None:
        """Delete the object permanently. Raises StorageNotFoundError if missing."""

    @abstractmethod
    def create_signed_url(self, bucket: str, key: str, ttl: timedelta) -> str:
        """Return a time-limited URL granting read access to the object."""
