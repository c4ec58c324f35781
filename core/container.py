"""
Dependency Injection Container for the accounts MCP.

Provides a centralized container for the key-value store and the components
built on it, enabling testability through mock injection and decoupling the
tool layer from concrete storage.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Protocol for key-value store implementations."""

    async def get(self, key: str) -> Any | None:
        """Get the value stored under a key."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a value under a key."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key."""
        ...

    def iterate(self) -> AsyncIterator[str]:
        """Iterate over all keys."""
        ...


@dataclass
class Container:
    """
    Dependency injection container.

    Holds the key-value store plus the account directory and token store that
    share it. Anything not provided is built from the accounts configuration.
    """

    kv_store: KeyValueStoreProtocol | None = None
    directory: Any | None = None
    token_store: Any | None = None

    def __post_init__(self) -> None:
        """Initialize with defaults if not provided."""
        from auth.config import get_accounts_config

        config = get_accounts_config()

        if self.kv_store is None:
            if config.store_backend == "memory":
                from auth.credential_types.store import MemoryKeyValueStore

                self.kv_store = MemoryKeyValueStore()
            else:
                from auth.credential_types.store import LocalDirectoryKeyValueStore

                self.kv_store = LocalDirectoryKeyValueStore(config.store_dir)

        if self.directory is None:
            from auth.account_directory import AccountDirectory

            self.directory = AccountDirectory(self.kv_store, serialize_writes=config.serialize_writes)

        if self.token_store is None:
            from auth.token_store import TokenStore

            self.token_store = TokenStore(self.kv_store)


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """
    Get the global container instance.

    Creates a new container with default implementations if none exists.

    Returns:
        The global Container instance.
    """
    global _container
    if _container is None:
        _container = Container()
        logger.debug("Initialized default dependency container")
    return _container


def set_container(container: Container) -> None:
    """
    Set the global container instance.

    Use this for testing to inject mock implementations.

    Args:
        container: The container to use as the global instance.
    """
    global _container
    _container = container
    logger.debug("Set custom dependency container")


def reset_container() -> None:
    """
    Reset the global container.

    Use this between tests to ensure a clean state.
    """
    global _container
    _container = None
    logger.debug("Reset dependency container")
