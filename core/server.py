"""
FastMCP server and account tool registration.

Each service gets four tools, all named after the service:

- {service}-account-me: Show current identity (email, alias, session expiry)
- {service}-account-switch: Use an account (switch if linked, OAuth if not)
- {service}-account-remove: Remove an account and delete its tokens
- {service}-account-list: Show all linked accounts

Tools return the operation result as a dictionary. Failures surface to MCP
clients as ToolError with the underlying message.
"""

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from auth.account_switch import AccountSwitcher
from auth.config import ACCOUNTS_MCP_APP_NAME, get_accounts_config
from auth.interfaces import BaseReauthProvider
from core.container import Container, get_container

logger = logging.getLogger(__name__)

server = FastMCP(name=ACCOUNTS_MCP_APP_NAME)


def register_account_tools(
    mcp: FastMCP,
    service: str,
    reauth: BaseReauthProvider,
    container: Container | None = None,
) -> AccountSwitcher:
    """
    Register the account management tools for one service.

    Args:
        mcp: Server to register the tools on.
        service: Service name used in tool names and storage keys.
        reauth: Re-authentication capability for the service.
        container: Dependency container; defaults to the global one.

    Returns:
        The AccountSwitcher backing the registered tools.
    """
    container = container or get_container()
    switcher = AccountSwitcher(container.directory, service, reauth, token_store=container.token_store)

    @mcp.tool(
        name=f"{service}-account-me",
        description=f"Show current {service} user identity. Returns email, alias (if set), and session expiry information.",
    )
    async def account_me() -> dict[str, Any]:
        try:
            result = await switcher.describe_current_account()
        except Exception as e:
            logger.error(f"[{service}-account-me] {e}")
            raise ToolError(f"Error getting {service} account info: {e}") from e
        return result.to_dict()

    @mcp.tool(
        name=f"{service}-account-switch",
        description=(
            f"Use {service} account (smart mode). If email/alias provided and already linked, switches to it "
            "without triggering OAuth. If not linked or no email provided, triggers OAuth browser flow to add "
            "account. Returns account email, whether it was newly added, and total account count."
        ),
    )
    async def account_switch(
        email: Annotated[
            str | None, Field(description="Email address or alias to use (if already linked, switches without OAuth)")
        ] = None,
        alias: Annotated[str | None, Field(description="Optional alias for easy identification")] = None,
    ) -> dict[str, Any]:
        try:
            result = await switcher.switch_account(email, alias=alias)
        except Exception as e:
            logger.error(f"[{service}-account-switch] {e}")
            raise ToolError(f"Error switching {service} account: {e}") from e
        return result.to_dict()

    @mcp.tool(
        name=f"{service}-account-remove",
        description=(
            f"Remove {service} account and delete stored tokens permanently. If removing the active account, "
            "the first remaining account becomes active. Requires email or alias parameter."
        ),
    )
    async def account_remove(
        account_id: Annotated[str, Field(min_length=1, description="Email address or alias of account to remove")],
    ) -> dict[str, Any]:
        try:
            result = await switcher.remove_account(account_id)
        except Exception as e:
            logger.error(f"[{service}-account-remove] {e}")
            raise ToolError(f"Error removing {service} account: {e}") from e
        return result.to_dict()

    @mcp.tool(
        name=f"{service}-account-list",
        description=f"List all linked {service} accounts with their aliases and active status.",
    )
    async def account_list() -> dict[str, Any]:
        try:
            result = await switcher.list_accounts()
        except Exception as e:
            logger.error(f"[{service}-account-list] {e}")
            raise ToolError(f"Error listing {service} accounts: {e}") from e
        return result.to_dict()

    logger.info(f"Registered account tools for {service}")
    return switcher


def register_configured_services(
    reauth_factory: Callable[[str], BaseReauthProvider],
    mcp: FastMCP | None = None,
    container: Container | None = None,
) -> dict[str, AccountSwitcher]:
    """
    Register account tools for every service listed in ACCOUNTS_MCP_SERVICES.

    Args:
        reauth_factory: Builds the re-authentication capability for a service.
        mcp: Server to register on; defaults to the module-level server.
        container: Dependency container; defaults to the global one.

    Returns:
        Mapping of service name to its AccountSwitcher.
    """
    mcp = mcp or server
    return {
        service: register_account_tools(mcp, service, reauth_factory(service), container=container)
        for service in get_accounts_config().services
    }
