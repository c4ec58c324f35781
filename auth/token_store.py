"""
Token storage for linked accounts.

Tokens are opaque to the directory: they are written and read through the
key codec as-is. The only field ever interpreted is ``expiresAt`` (epoch
milliseconds), and only to tell a user how long a session has left.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from google.oauth2.credentials import Credentials

from auth.credential_types.types import CachedToken, utc_now_ms
from auth.interfaces import BaseKeyValueStore
from auth.keys import account_key

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class TokenStore:
    """Typed pass-through access to per-account credential records."""

    def __init__(self, store: BaseKeyValueStore):
        self.store = store

    async def get_token(self, account_id: str, service: str) -> Any | None:
        """Get the stored token payload, or None if there is none."""
        return await self.store.get(account_key("token", account_id, service))

    async def set_token(self, account_id: str, service: str, token: Any) -> None:
        """Store a token payload, replacing any previous one."""
        if isinstance(token, CachedToken):
            token = token.to_dict()
        await self.store.set(account_key("token", account_id, service), token)
        logger.debug(f"[set_token] Stored token for {account_id} ({service})")

    async def delete_token(self, account_id: str, service: str) -> bool:
        """Delete a token payload. Returns False if none was stored."""
        return await self.store.delete(account_key("token", account_id, service))

    async def get_cached_token(self, account_id: str, service: str) -> CachedToken | None:
        """Get the stored token parsed as a CachedToken."""
        data = await self.get_token(account_id, service)
        if not isinstance(data, dict):
            return None
        return CachedToken.from_dict(data)

    async def get_google_credentials(
        self,
        account_id: str,
        service: str,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> Credentials | None:
        """Load the stored token as google-auth Credentials, or None if there is none."""
        token = await self.get_cached_token(account_id, service)
        if token is None:
            return None
        return token_to_google_credentials(token, client_id=client_id, client_secret=client_secret)

    async def set_google_credentials(self, account_id: str, service: str, credentials: Credentials) -> None:
        """Store google-auth Credentials, e.g. after a refresh or a new consent."""
        await self.set_token(account_id, service, token_from_google_credentials(credentials))


def format_duration(ms: int) -> str:
    """
    Format milliseconds as a compact human-readable duration.

    Examples: "30s", "45m", "2h", "2h 15m".
    """
    total_seconds = ms // 1000
    if total_seconds < 60:
        return f"{total_seconds}s"

    minutes = total_seconds // 60
    if minutes < 60:
        return f"{minutes}m"

    hours, remaining_minutes = divmod(minutes, 60)
    if remaining_minutes == 0:
        return f"{hours}h"
    return f"{hours}h {remaining_minutes}m"


def describe_expiry(token: CachedToken | dict[str, Any] | None, now_ms: int | None = None) -> str:
    """
    Describe how long a token remains valid.

    Returns "never" when there is no token or it carries no expiry, "expired"
    when the expiry has passed, otherwise a duration from format_duration.
    """
    if token is None:
        return "never"

    expires_at = token.expires_at if isinstance(token, CachedToken) else token.get("expiresAt")
    if not expires_at:
        return "never"

    now = utc_now_ms() if now_ms is None else now_ms
    if expires_at > now:
        return format_duration(int(expires_at) - now)
    return "expired"


# =============================================================================
# google-auth conversion
# =============================================================================


def token_from_google_credentials(credentials: Credentials) -> CachedToken:
    """Build a CachedToken from google-auth Credentials (naive expiry is UTC)."""
    expires_at = None
    if credentials.expiry:
        expiry = credentials.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        expires_at = int(expiry.timestamp() * 1000)

    scopes = credentials.scopes
    return CachedToken(
        access_token=credentials.token,
        refresh_token=credentials.refresh_token,
        expires_at=expires_at,
        scope=" ".join(scopes) if scopes else None,
        token_type="Bearer",
    )


def token_to_google_credentials(
    token: CachedToken | dict[str, Any],
    client_id: str | None = None,
    client_secret: str | None = None,
    token_uri: str = GOOGLE_TOKEN_URI,
) -> Credentials:
    """Build google-auth Credentials from a stored token payload."""
    if not isinstance(token, CachedToken):
        token = CachedToken.from_dict(token)

    expiry = None
    if token.expires_at is not None:
        # google-auth compares expiry against naive UTC datetimes
        expiry = datetime.fromtimestamp(token.expires_at / 1000, tz=timezone.utc).replace(tzinfo=None)

    return Credentials(
        token=token.access_token,
        refresh_token=token.refresh_token,
        token_uri=token_uri,
        client_id=client_id,
        client_secret=client_secret,
        scopes=token.scope.split() if token.scope else None,
        expiry=expiry,
    )
