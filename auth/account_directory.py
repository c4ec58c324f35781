"""
Account directory for multi-account OAuth services.

Keeps, per service, the ordered list of linked accounts and the single active
account, plus per-account metadata. Each of these is an independent record in
the key-value store, so every mutating operation finishes by re-establishing
the invariant that the active account (when set) is a linked account.

There are no cross-key transactions. A store error midway through a
multi-step operation propagates and leaves earlier writes in place.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from auth.credential_types.types import AccountInfo
from auth.interfaces import BaseKeyValueStore
from auth.keys import account_key, service_key

logger = logging.getLogger(__name__)


class AccountDirectory:
    """
    CRUD over linked accounts, the active account pointer and account metadata.

    Args:
        store: Injected key-value store.
        serialize_writes: Hold a per-service asyncio lock around the
            read-modify-write sequences of add/remove. Only protects callers in
            the same process and event loop.
    """

    def __init__(self, store: BaseKeyValueStore, serialize_writes: bool = True):
        self.store = store
        self.serialize_writes = serialize_writes
        self._service_locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def _service_guard(self, service: str) -> AsyncIterator[None]:
        if not self.serialize_writes:
            yield
            return

        lock = self._service_locks.get(service)
        if lock is None:
            lock = self._service_locks[service] = asyncio.Lock()
        async with lock:
            yield

    # =========================================================================
    # Account lifecycle
    # =========================================================================

    async def add_account(self, service: str, account_id: str) -> None:
        """
        Link an account to a service, making it active if none is.

        Calling twice with the same arguments is a no-op the second time.
        """
        linked_key = service_key("linked", service)
        account_key("token", account_id, service)  # validate account_id up front

        async with self._service_guard(service):
            linked = await self.get_linked_accounts(service)

            if account_id not in linked:
                linked.append(account_id)
                await self.store.set(linked_key, linked)
                logger.info(f"[add_account] Linked {account_id} to {service} ({len(linked)} total)")

            active = await self.get_active_account(service)
            if not active:
                await self.set_active_account(service, account_id)
                logger.info(f"[add_account] {account_id} is now the active {service} account")

    async def remove_account(self, service: str, account_id: str) -> None:
        """
        Remove an account: delete its token and metadata, unlink it, and move
        the active pointer to the first remaining account (or clear it).
        """
        token_key = account_key("token", account_id, service)
        metadata_key = account_key("metadata", account_id, service)
        linked_key = service_key("linked", service)

        async with self._service_guard(service):
            await self.store.delete(token_key)
            await self.store.delete(metadata_key)

            linked = await self.get_linked_accounts(service)
            filtered = [linked_id for linked_id in linked if linked_id != account_id]
            await self.store.set(linked_key, filtered)

            active = await self.get_active_account(service)
            if active == account_id:
                new_active = filtered[0] if filtered else None
                await self.set_active_account(service, new_active)
                if new_active:
                    logger.info(f"[remove_account] Active {service} account moved to {new_active}")
                else:
                    logger.info(f"[remove_account] No {service} accounts remain, cleared active account")

        logger.info(f"[remove_account] Removed {account_id} from {service}")

    # =========================================================================
    # Service-scoped records
    # =========================================================================

    async def get_active_account(self, service: str) -> str | None:
        """Get the active account id for a service, or None."""
        return await self.store.get(service_key("active", service))

    async def set_active_account(self, service: str, account_id: str | None) -> None:
        """
        Set the active account for a service, or clear it with None.

        The account is not checked against the linked list; callers must only
        pass linked accounts.
        """
        key = service_key("active", service)
        if account_id is None:
            await self.store.delete(key)
            logger.debug(f"[set_active_account] Cleared active {service} account")
        else:
            await self.store.set(key, account_id)
            logger.debug(f"[set_active_account] Active {service} account: {account_id}")

    async def get_linked_accounts(self, service: str) -> list[str]:
        """Get linked account ids for a service in insertion order (empty list if none)."""
        accounts = await self.store.get(service_key("linked", service))
        return list(accounts) if accounts else []

    # =========================================================================
    # Account metadata
    # =========================================================================

    async def get_account_info(self, account_id: str, service: str) -> AccountInfo | None:
        """Get account metadata (alias, timestamps), or None if absent."""
        data = await self.store.get(account_key("metadata", account_id, service))
        if data is None:
            return None
        return AccountInfo.from_dict(data)

    async def set_account_info(self, account_id: str, service: str, info: AccountInfo) -> None:
        """Replace account metadata. Fields are not merged with the stored record."""
        await self.store.set(account_key("metadata", account_id, service), info.to_dict())

    async def find_account(self, service: str, email_or_alias: str) -> str | None:
        """
        Resolve an email or alias to a linked account id.

        Exact id match wins; otherwise the first linked account (in list
        order) whose alias matches.
        """
        linked = await self.get_linked_accounts(service)

        if email_or_alias in linked:
            return email_or_alias

        for account_id in linked:
            info = await self.get_account_info(account_id, service)
            if info and info.alias == email_or_alias:
                logger.debug(f"[find_account] Alias '{email_or_alias}' resolved to {account_id}")
                return account_id

        return None
