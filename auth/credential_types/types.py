"""
Type definitions for account management.

Records persisted in the key-value store serialize with camelCase keys so the
stored payloads stay compatible with other clients of the same store. Result
types are what the tool layer hands back to MCP clients.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a 'Z' suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_ms() -> int:
    """Current UTC time in epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass
class AccountInfo:
    """
    Metadata stored alongside a linked account.

    Attributes:
        email: Stable email address of the account.
        added_at: ISO-8601 creation timestamp.
        alias: Optional friendly name, resolved by linear scan.
        last_used: Optional ISO-8601 timestamp of last use.
        metadata: Free-form profile details (name, picture, ...).
    """

    email: str
    added_at: str
    alias: str | None = None
    last_used: str | None = None
    metadata: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        data: dict[str, Any] = {"email": self.email, "addedAt": self.added_at}
        if self.alias is not None:
            data["alias"] = self.alias
        if self.last_used is not None:
            data["lastUsed"] = self.last_used
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountInfo":
        """Create from dictionary (loaded from the store)."""
        return cls(
            email=data.get("email", ""),
            added_at=data.get("addedAt", ""),
            alias=data.get("alias"),
            last_used=data.get("lastUsed"),
            metadata=data.get("metadata"),
        )


@dataclass
class CachedToken:
    """
    OAuth token payload as stored per (account, service).

    Only ``expires_at`` (epoch milliseconds) is interpreted by the directory,
    and only for display.
    """

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    scope: str | None = None
    token_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        data: dict[str, Any] = {"accessToken": self.access_token}
        if self.refresh_token is not None:
            data["refreshToken"] = self.refresh_token
        if self.expires_at is not None:
            data["expiresAt"] = self.expires_at
        if self.scope is not None:
            data["scope"] = self.scope
        if self.token_type is not None:
            data["tokenType"] = self.token_type
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedToken":
        """Create from dictionary (loaded from the store)."""
        expires_at = data.get("expiresAt")
        return cls(
            access_token=data.get("accessToken", ""),
            refresh_token=data.get("refreshToken"),
            expires_at=int(expires_at) if expires_at is not None else None,
            scope=data.get("scope"),
            token_type=data.get("tokenType"),
        )


# =============================================================================
# Operation Results
# =============================================================================


@dataclass
class SwitchResult:
    """Outcome of a smart account switch."""

    email: str
    is_new: bool
    total_accounts: int
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "success",
            "email": self.email,
            "isNew": self.is_new,
            "totalAccounts": self.total_accounts,
            "message": self.message,
        }


@dataclass
class RemoveResult:
    """Outcome of removing an account by email or alias."""

    service: str
    removed: str
    remaining_accounts: int
    new_active_account: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "success",
            "service": self.service,
            "removed": self.removed,
            "remainingAccounts": self.remaining_accounts,
        }
        if self.new_active_account:
            data["newActiveAccount"] = self.new_active_account
        data["message"] = self.message
        return data


@dataclass
class AccountSummary:
    """One row of an account listing."""

    email: str
    is_active: bool
    alias: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"email": self.email}
        if self.alias is not None:
            data["alias"] = self.alias
        data["isActive"] = self.is_active
        return data


@dataclass
class AccountListResult:
    """All linked accounts of a service."""

    service: str
    accounts: list[AccountSummary] = field(default_factory=list)
    message: str = ""

    @property
    def total_accounts(self) -> int:
        return len(self.accounts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "success",
            "service": self.service,
            "accounts": [account.to_dict() for account in self.accounts],
            "totalAccounts": self.total_accounts,
            "message": self.message,
        }


@dataclass
class CurrentAccountResult:
    """Identity of the active account of a service."""

    service: str
    email: str
    alias: str | None = None
    session_expires_in: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": "success", "service": self.service, "email": self.email}
        if self.alias:
            data["alias"] = self.alias
        if self.session_expires_in:
            data["sessionExpiresIn"] = self.session_expires_in
        data["message"] = self.message
        return data
