"""
Credential types subpackage for the accounts MCP.

This package contains:
- types: account metadata, token payload and result dataclasses
- store: key-value store implementations
"""

from auth.credential_types.store import LocalDirectoryKeyValueStore, MemoryKeyValueStore
from auth.credential_types.types import (
    AccountInfo,
    AccountListResult,
    AccountSummary,
    CachedToken,
    CurrentAccountResult,
    RemoveResult,
    SwitchResult,
)

__all__ = [
    "AccountInfo",
    "AccountListResult",
    "AccountSummary",
    "CachedToken",
    "CurrentAccountResult",
    "RemoveResult",
    "SwitchResult",
    "LocalDirectoryKeyValueStore",
    "MemoryKeyValueStore",
]
