"""
Abstract interfaces for account management components.

These interfaces define the contracts for the key-value store that backs the
account directory and for the re-authentication capability used when an
account has to be linked interactively. They enable dependency injection and
testability.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any


class BaseKeyValueStore(ABC):
    """Abstract base for key-value storage.

    Implementations provide at most per-key atomicity. Values are
    JSON-compatible (str, list, dict, numbers, None).
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Get the value stored under a key.

        Args:
            key: The storage key.

        Returns:
            The stored value, or None if the key is absent.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a value under a key, replacing any previous value.

        Args:
            key: The storage key.
            value: JSON-compatible value.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key.

        Args:
            key: The storage key.

        Returns:
            True if the key existed, False otherwise.
        """
        pass

    def iterate(self) -> AsyncIterator[str]:
        """Iterate over all keys in the store.

        Stores that cannot enumerate their keys leave this unimplemented.

        Raises:
            NotImplementedError: If the store does not support enumeration.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support key iteration")


class BaseReauthProvider(ABC):
    """Abstract base for the re-authentication capability.

    Implementations drive the interactive OAuth flow (browser, loopback
    server, device code) for a single service.
    """

    @abstractmethod
    async def identify_current_account(self) -> str:
        """Return the email of the account the provider is currently authorized as.

        Used when the directory holds no state for the service yet.
        """
        pass

    @abstractmethod
    async def authenticate_new_account(self) -> str:
        """Run an interactive authorization flow for a new account.

        Returns:
            The email the flow resolved to. It may differ from any email the
            caller asked for.
        """
        pass
