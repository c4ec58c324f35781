# Make the auth directory a Python package
# Public API exports from canonical locations

from auth.account_directory import AccountDirectory
from auth.account_switch import AccountSwitcher
from auth.config import (
    ACCOUNTS_MCP_APP_NAME,
    ACCOUNTS_MCP_STORE_DIR,
    AccountsConfig,
    get_accounts_config,
    get_store_directory,
    reload_accounts_config,
)
from auth.interfaces import BaseKeyValueStore, BaseReauthProvider
from auth.keys import account_key, list_account_ids, parse_token_key, service_key
from auth.token_store import TokenStore, describe_expiry, format_duration

__all__ = [
    "AccountDirectory",
    "AccountSwitcher",
    "AccountsConfig",
    "BaseKeyValueStore",
    "BaseReauthProvider",
    "TokenStore",
    "account_key",
    "describe_expiry",
    "format_duration",
    "get_accounts_config",
    "get_store_directory",
    "list_account_ids",
    "parse_token_key",
    "reload_accounts_config",
    "service_key",
    "ACCOUNTS_MCP_APP_NAME",
    "ACCOUNTS_MCP_STORE_DIR",
]
