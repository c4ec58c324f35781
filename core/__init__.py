"""Core utilities for the accounts MCP."""

from core.container import Container, get_container, reset_container, set_container
from core.errors import (
    AccountManagerError,
    AccountNotFoundError,
    AccountsMCPError,
    ConfigurationError,
    InvalidKeyParameterError,
    RequiresAuthenticationError,
    StoreError,
)

__all__ = [
    "AccountManagerError",
    "AccountNotFoundError",
    "AccountsMCPError",
    "ConfigurationError",
    "Container",
    "get_container",
    "InvalidKeyParameterError",
    "RequiresAuthenticationError",
    "reset_container",
    "set_container",
    "StoreError",
]
