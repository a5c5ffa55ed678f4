"""Registry the host process uses to load object stores by name."""

import logging
from typing import Callable, Mapping

from .storage.base import ObjectStore

log = logging.getLogger(__name__)

ObjectStoreFactory = Callable[[], ObjectStore]

_FACTORIES: dict[str, ObjectStoreFactory] = {}


def register_object_store(name: str, factory: ObjectStoreFactory) -> None:
    """Register a zero-argument factory under ``name``.

    Raises:
        ValueError: If ``name`` is empty or already registered.
    """
    if not name:
        raise ValueError("Object store name must be a non-empty string")
    if name in _FACTORIES:
        raise ValueError(f"Object store {name!r} is already registered")
    _FACTORIES[name] = factory
    log.debug("Registered object store %s", name)


def registered_object_stores() -> list[str]:
    return sorted(_FACTORIES)


def new_object_store(name: str, config: Mapping[str, str]) -> ObjectStore:
    """Instantiate the store registered as ``name`` and initialize it.

    The returned store is ready to use; ``init`` errors propagate unchanged.

    Raises:
        ValueError: If no store is registered under ``name``.
        StorageConfigError: If the store rejects ``config``.
    """
    factory = _FACTORIES.get(name)
    if factory is None:
        supported = ", ".join(registered_object_stores())
        raise ValueError(f"Unsupported object store: {name!r}. Supported: {supported}")

    store = factory()
    store.init(config)
    log.info("Loaded object store %s", name)
    return store


def _create_azure_store() -> ObjectStore:
    from .storage.azure_store import AzureObjectStore

    return AzureObjectStore()


register_object_store("azure", _create_azure_store)
