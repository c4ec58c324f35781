"""
Smart account switching for a single service.

Decides whether a requested account can be served from the directory (switch
without OAuth) or whether the interactive re-authentication flow has to run,
then reconciles the directory afterwards. Also hosts the other account
operations exposed to MCP clients: removal by email or alias, listing, and
"who am I".
"""

import asyncio
import logging

from google.oauth2.credentials import Credentials

from auth.account_directory import AccountDirectory
from auth.credential_types.types import (
    AccountInfo,
    AccountListResult,
    AccountSummary,
    CurrentAccountResult,
    RemoveResult,
    SwitchResult,
    utc_now_iso,
)
from auth.interfaces import BaseReauthProvider
from auth.token_store import TokenStore, describe_expiry
from core.errors import AccountNotFoundError, RequiresAuthenticationError

logger = logging.getLogger(__name__)


class AccountSwitcher:
    """
    Account operations for one service, backed by an AccountDirectory.

    Args:
        directory: Directory holding linked/active/metadata records.
        service: Service name (e.g. 'gmail').
        reauth: Capability used to link accounts interactively.
        token_store: Token access for session expiry; defaults to one over
            the directory's store.
    """

    def __init__(
        self,
        directory: AccountDirectory,
        service: str,
        reauth: BaseReauthProvider,
        token_store: TokenStore | None = None,
    ):
        self.directory = directory
        self.service = service
        self.reauth = reauth
        self.token_store = token_store or TokenStore(directory.store)

    async def switch_account(self, email_or_alias: str | None = None, alias: str | None = None) -> SwitchResult:
        """
        Use an account, linking it first if needed.

        A reference that resolves to a linked account (by email, then alias)
        is switched to without re-authentication. Anything else runs
        ``authenticate_new_account`` and links whatever email it returns.

        Args:
            email_or_alias: Email or alias of the account to use.
            alias: Alias to assign to the resulting account.

        Returns:
            SwitchResult with the final email, whether it was newly linked,
            and the linked account count afterwards.
        """
        service = self.service
        logger.info(f"[switch_account] Starting {service} account switch (email_or_alias={email_or_alias!r}, alias={alias!r})")

        existing_accounts = await self.directory.get_linked_accounts(service)

        if email_or_alias:
            account_id = await self.directory.find_account(service, email_or_alias)
            if account_id:
                logger.info(f"[switch_account] {account_id} already linked, switching without OAuth")
                await self.directory.set_active_account(service, account_id)

                if alias:
                    existing_info = await self.directory.get_account_info(account_id, service)
                    await self.directory.set_account_info(
                        account_id, service, self._merge_info(account_id, existing_info, alias)
                    )

                return SwitchResult(
                    email=account_id,
                    is_new=False,
                    total_accounts=len(existing_accounts),
                    message=f"Account already linked: {account_id}. Set as active account (no OAuth needed).",
                )

            logger.info(f"[switch_account] '{email_or_alias}' is not linked to {service}, starting OAuth flow")

        email = await self.reauth.authenticate_new_account()

        is_new = email not in existing_accounts
        if is_new:
            await self.directory.add_account(service, email)
            logger.info(f"[switch_account] Added new {service} account: {email}")
        else:
            logger.info(f"[switch_account] OAuth returned already linked account: {email}")

        existing_info = None if is_new else await self.directory.get_account_info(email, service)
        await self.directory.set_account_info(email, service, self._merge_info(email, existing_info, alias))
        await self.directory.set_active_account(service, email)

        total_accounts = len(existing_accounts) + 1 if is_new else len(existing_accounts)
        if is_new:
            message = f"Successfully added {service} account: {email} ({total_accounts} total)"
        else:
            message = f"Account already linked: {email}. Set as active account."

        return SwitchResult(email=email, is_new=is_new, total_accounts=total_accounts, message=message)

    async def register_current_account(self) -> SwitchResult:
        """
        Link the account the provider is already authorized as.

        Only consults the provider when the service has no active account.
        """
        service = self.service
        linked = await self.directory.get_linked_accounts(service)
        active = await self.directory.get_active_account(service)
        if active:
            return SwitchResult(
                email=active,
                is_new=False,
                total_accounts=len(linked),
                message=f"Active {service} account: {active}",
            )

        email = await self.reauth.identify_current_account()
        is_new = email not in linked
        await self.directory.add_account(service, email)

        existing_info = await self.directory.get_account_info(email, service)
        if existing_info is None:
            await self.directory.set_account_info(email, service, AccountInfo(email=email, added_at=utc_now_iso()))

        await self.directory.set_active_account(service, email)
        total_accounts = len(linked) + 1 if is_new else len(linked)
        logger.info(f"[register_current_account] Registered current {service} account: {email}")

        return SwitchResult(
            email=email,
            is_new=is_new,
            total_accounts=total_accounts,
            message=f"Registered {service} account: {email} ({total_accounts} total)",
        )

    async def remove_account(self, account_ref: str) -> RemoveResult:
        """
        Remove an account by email or alias and delete its stored token.

        Raises:
            AccountNotFoundError: If the service has no accounts or the
                reference resolves to none of them.
        """
        service = self.service
        linked = await self.directory.get_linked_accounts(service)
        if not linked:
            raise AccountNotFoundError(account_ref, f"No {service} accounts to remove")

        account_id = await self.directory.find_account(service, account_ref)
        if not account_id:
            raise AccountNotFoundError(account_ref, f"Account not found: {account_ref}")

        removing_active = await self.directory.get_active_account(service) == account_id
        await self.directory.remove_account(service, account_id)

        remaining = [linked_id for linked_id in linked if linked_id != account_id]
        new_active = remaining[0] if removing_active and remaining else None

        logger.info(f"[remove_account] Removed {service} account {account_id} ({len(remaining)} remaining)")

        message = f"Removed {service} account: {account_id}"
        if new_active:
            message += f". Active account is now: {new_active}"

        return RemoveResult(
            service=service,
            removed=account_id,
            remaining_accounts=len(remaining),
            new_active_account=new_active,
            message=message,
        )

    async def list_accounts(self) -> AccountListResult:
        """List linked accounts with aliases and active status."""
        service = self.service
        linked = await self.directory.get_linked_accounts(service)
        if not linked:
            return AccountListResult(
                service=service,
                message=f"No {service} accounts linked. Use account-switch to add an account.",
            )

        active = await self.directory.get_active_account(service)
        infos = await asyncio.gather(*(self.directory.get_account_info(account_id, service) for account_id in linked))

        accounts = [
            AccountSummary(email=account_id, alias=info.alias if info else None, is_active=account_id == active)
            for account_id, info in zip(linked, infos)
        ]
        return AccountListResult(
            service=service,
            accounts=accounts,
            message=f"Found {len(accounts)} {service} account(s)",
        )

    async def describe_current_account(self) -> CurrentAccountResult:
        """
        Describe the active account: email, alias and session expiry.

        Raises:
            RequiresAuthenticationError: If the service has no active account.
        """
        service = self.service
        active = await self.directory.get_active_account(service)
        if not active:
            raise RequiresAuthenticationError(service)

        info = await self.directory.get_account_info(active, service)
        email = info.email if info and info.email else active
        alias = info.alias if info else None

        try:
            token = await self.token_store.get_cached_token(active, service)
            session_expires_in = describe_expiry(token)
        except Exception as e:
            logger.debug(f"[describe_current_account] Could not read token for {active}: {e}")
            session_expires_in = "never"

        message = f"Authenticated as {email}"
        if alias:
            message += f" ({alias})"
        message += f". Session expires in {session_expires_in}."

        return CurrentAccountResult(
            service=service,
            email=email,
            alias=alias,
            session_expires_in=session_expires_in,
            message=message,
        )

    async def get_active_credentials(
        self, client_id: str | None = None, client_secret: str | None = None
    ) -> Credentials:
        """
        Get google-auth Credentials for the active account.

        Raises:
            RequiresAuthenticationError: If there is no active account or it
                has no stored token.
        """
        service = self.service
        active = await self.directory.get_active_account(service)
        if not active:
            raise RequiresAuthenticationError(service)

        credentials = await self.token_store.get_google_credentials(
            active, service, client_id=client_id, client_secret=client_secret
        )
        if credentials is None:
            raise RequiresAuthenticationError(service, active)
        return credentials

    @staticmethod
    def _merge_info(email: str, existing: AccountInfo | None, alias: str | None) -> AccountInfo:
        """Upsert metadata: keep existing fields, stamp addedAt for new records, apply alias if given."""
        if existing is None:
            return AccountInfo(email=email, added_at=utc_now_iso(), alias=alias)

        return AccountInfo(
            email=email,
            added_at=existing.added_at or utc_now_iso(),
            alias=alias if alias else existing.alias,
            last_used=existing.last_used,
            metadata=existing.metadata,
        )
