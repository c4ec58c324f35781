"""
Configuration Management for the accounts MCP.

All settings come from environment variables and are read once into an
AccountsConfig instance. Use reload_accounts_config() after changing the
environment (tests do this through monkeypatch).
"""

import os

from core.errors import ConfigurationError

ACCOUNTS_MCP_APP_NAME = "Accounts MCP"
ACCOUNTS_MCP_STORE_DIR = "~/.config/accounts-mcp"

STORE_BACKENDS = ("file", "memory")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class AccountsConfig:
    """
    Centralized account store configuration.

    Attributes:
        store_backend: 'file' (JSON document on disk) or 'memory'.
        store_dir: Directory for the file backend.
        serialize_writes: Per-service in-process locking of directory writes.
        services: Default service names to register account tools for.
    """

    def __init__(self):
        self.store_backend = os.getenv("ACCOUNTS_MCP_STORE", "file").strip().lower()
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"ACCOUNTS_MCP_STORE must be one of {', '.join(STORE_BACKENDS)}, got: {self.store_backend}"
            )

        self.store_dir = os.path.expanduser(os.getenv("ACCOUNTS_MCP_STORE_DIR", ACCOUNTS_MCP_STORE_DIR))
        self.serialize_writes = _env_flag("ACCOUNTS_MCP_SERIALIZE_WRITES", "true")

        services = os.getenv("ACCOUNTS_MCP_SERVICES", "")
        # Remove duplicates while preserving order
        self.services = list(dict.fromkeys(s.strip() for s in services.split(",") if s.strip()))

    def get_environment_summary(self) -> dict:
        """
        Get a summary of the current configuration.

        Returns:
            Dictionary with configuration values
        """
        return {
            "app_name": ACCOUNTS_MCP_APP_NAME,
            "store_backend": self.store_backend,
            "store_dir": self.store_dir,
            "serialize_writes": self.serialize_writes,
            "services": list(self.services),
        }


# Global configuration instance
_accounts_config: AccountsConfig | None = None


def get_accounts_config() -> AccountsConfig:
    """
    Get the global configuration instance.

    Returns:
        The singleton AccountsConfig instance
    """
    global _accounts_config
    if _accounts_config is None:
        _accounts_config = AccountsConfig()
    return _accounts_config


def reload_accounts_config() -> AccountsConfig:
    """
    Reload the configuration from environment variables.

    Returns:
        The reloaded AccountsConfig instance
    """
    global _accounts_config
    _accounts_config = AccountsConfig()
    return _accounts_config


def get_store_directory() -> str:
    """Get the expanded directory used by the file store."""
    return get_accounts_config().store_dir
