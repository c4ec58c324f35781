"""Unit tests for TokenStore and expiry helpers."""

from datetime import datetime, timedelta, timezone

import pytest
from google.oauth2.credentials import Credentials

from auth.credential_types.types import CachedToken
from auth.token_store import (
    TokenStore,
    describe_expiry,
    format_duration,
    token_from_google_credentials,
    token_to_google_credentials,
)
from core.errors import InvalidKeyParameterError


class TestTokenStore:
    """Tests for token pass-through storage."""

    @pytest.fixture
    def tokens(self, kv_store):
        return TokenStore(kv_store)

    @pytest.mark.asyncio
    async def test_set_and_get_token(self, tokens, kv_store, sample_token):
        await tokens.set_token("user@gmail.com", "gmail", sample_token)

        assert await tokens.get_token("user@gmail.com", "gmail") == sample_token
        assert await kv_store.get("user@gmail.com:gmail:token") == sample_token

    @pytest.mark.asyncio
    async def test_missing_token_returns_none(self, tokens):
        assert await tokens.get_token("nobody@gmail.com", "gmail") is None

    @pytest.mark.asyncio
    async def test_arbitrary_payload_passes_through(self, tokens):
        await tokens.set_token("user@gmail.com", "gmail", "opaque-string")
        assert await tokens.get_token("user@gmail.com", "gmail") == "opaque-string"

    @pytest.mark.asyncio
    async def test_cached_token_is_serialized(self, tokens, kv_store):
        await tokens.set_token("user@gmail.com", "gmail", CachedToken(access_token="abc", expires_at=1000))
        assert await kv_store.get("user@gmail.com:gmail:token") == {"accessToken": "abc", "expiresAt": 1000}

    @pytest.mark.asyncio
    async def test_get_cached_token(self, tokens, sample_token):
        await tokens.set_token("user@gmail.com", "gmail", sample_token)

        token = await tokens.get_cached_token("user@gmail.com", "gmail")

        assert token.access_token == "ya29.test_access_token"
        assert token.refresh_token == "1//test_refresh_token"
        assert token.expires_at == 1_900_000_000_000

    @pytest.mark.asyncio
    async def test_get_cached_token_ignores_non_mapping(self, tokens):
        await tokens.set_token("user@gmail.com", "gmail", "opaque-string")
        assert await tokens.get_cached_token("user@gmail.com", "gmail") is None

    @pytest.mark.asyncio
    async def test_overwrite_token(self, tokens):
        await tokens.set_token("user@gmail.com", "gmail", {"accessToken": "old"})
        await tokens.set_token("user@gmail.com", "gmail", {"accessToken": "new"})
        assert await tokens.get_token("user@gmail.com", "gmail") == {"accessToken": "new"}

    @pytest.mark.asyncio
    async def test_delete_token(self, tokens):
        await tokens.set_token("user@gmail.com", "gmail", {"accessToken": "t"})

        assert await tokens.delete_token("user@gmail.com", "gmail") is True
        assert await tokens.delete_token("user@gmail.com", "gmail") is False

    @pytest.mark.asyncio
    async def test_invalid_account_id_raises(self, tokens):
        with pytest.raises(InvalidKeyParameterError):
            await tokens.get_token("bad:id", "gmail")


class TestFormatDuration:
    """Tests for duration formatting."""

    @pytest.mark.parametrize(
        "ms,expected",
        [
            (0, "0s"),
            (30_000, "30s"),
            (59_999, "59s"),
            (60_000, "1m"),
            (45 * 60_000, "45m"),
            (2 * 3_600_000, "2h"),
            (2 * 3_600_000 + 15 * 60_000, "2h 15m"),
        ],
    )
    def test_format_duration(self, ms, expected):
        assert format_duration(ms) == expected


class TestDescribeExpiry:
    """Tests for session expiry display."""

    def test_no_token_is_never(self):
        assert describe_expiry(None) == "never"

    def test_token_without_expiry_is_never(self):
        assert describe_expiry({"accessToken": "t"}) == "never"

    def test_expired_token(self):
        assert describe_expiry({"expiresAt": 1_000}, now_ms=2_000) == "expired"

    def test_future_expiry(self):
        assert describe_expiry(CachedToken(access_token="t", expires_at=3_601_000), now_ms=1_000) == "1h"

    def test_uses_current_time_by_default(self):
        expires_at = int((datetime.now(timezone.utc) + timedelta(minutes=10)).timestamp() * 1000)
        assert describe_expiry({"expiresAt": expires_at}) in ("9m", "10m")


class TestGoogleCredentialConversion:
    """Tests for converting between CachedToken and google-auth Credentials."""

    def test_from_google_credentials(self):
        expiry = datetime(2030, 1, 1, 12, 0, 0)
        credentials = Credentials(
            token="ya29.token",
            refresh_token="1//refresh",
            token_uri="https://oauth2.googleapis.com/token",
            client_id="client",
            client_secret="secret",
            scopes=["https://www.googleapis.com/auth/drive", "https://www.googleapis.com/auth/gmail.readonly"],
            expiry=expiry,
        )

        token = token_from_google_credentials(credentials)

        assert token.access_token == "ya29.token"
        assert token.refresh_token == "1//refresh"
        assert token.expires_at == int(expiry.replace(tzinfo=timezone.utc).timestamp() * 1000)
        assert token.scope == "https://www.googleapis.com/auth/drive https://www.googleapis.com/auth/gmail.readonly"
        assert token.token_type == "Bearer"

    def test_to_google_credentials(self):
        token = {
            "accessToken": "ya29.token",
            "refreshToken": "1//refresh",
            "expiresAt": int(datetime(2030, 1, 1, tzinfo=timezone.utc).timestamp() * 1000),
            "scope": "https://www.googleapis.com/auth/drive",
        }

        credentials = token_to_google_credentials(token, client_id="client", client_secret="secret")

        assert credentials.token == "ya29.token"
        assert credentials.refresh_token == "1//refresh"
        assert credentials.client_id == "client"
        assert credentials.scopes == ["https://www.googleapis.com/auth/drive"]
        assert credentials.expiry == datetime(2030, 1, 1)

    def test_to_google_credentials_without_expiry(self):
        credentials = token_to_google_credentials(CachedToken(access_token="t"))

        assert credentials.expiry is None
        assert credentials.scopes is None

    @pytest.mark.asyncio
    async def test_store_and_load_google_credentials(self, kv_store):
        tokens = TokenStore(kv_store)
        credentials = Credentials(
            token="ya29.token",
            refresh_token="1//refresh",
            token_uri="https://oauth2.googleapis.com/token",
            scopes=["https://www.googleapis.com/auth/drive"],
            expiry=datetime(2030, 1, 1),
        )

        await tokens.set_google_credentials("user@gmail.com", "drive", credentials)
        stored = await kv_store.get("user@gmail.com:drive:token")
        loaded = await tokens.get_google_credentials("user@gmail.com", "drive", client_id="client")

        assert stored["accessToken"] == "ya29.token"
        assert stored["expiresAt"] == int(datetime(2030, 1, 1, tzinfo=timezone.utc).timestamp() * 1000)
        assert loaded.token == "ya29.token"
        assert loaded.refresh_token == "1//refresh"
        assert loaded.client_id == "client"
        assert loaded.expiry == datetime(2030, 1, 1)

    @pytest.mark.asyncio
    async def test_load_google_credentials_without_token(self, kv_store):
        assert await TokenStore(kv_store).get_google_credentials("user@gmail.com", "drive") is None
