"""Shared pytest fixtures for accounts-mcp tests."""

import tempfile

import pytest

from auth.account_directory import AccountDirectory
from auth.credential_types.store import MemoryKeyValueStore
from auth.interfaces import BaseReauthProvider


class FakeReauthProvider(BaseReauthProvider):
    """Re-authentication capability that returns scripted emails and counts calls."""

    def __init__(self, new_accounts=None, current_account=None, error=None):
        self.new_accounts = list(new_accounts or [])
        self.current_account = current_account
        self.error = error
        self.authenticate_calls = 0
        self.identify_calls = 0

    async def identify_current_account(self) -> str:
        self.identify_calls += 1
        if self.error:
            raise self.error
        return self.current_account

    async def authenticate_new_account(self) -> str:
        self.authenticate_calls += 1
        if self.error:
            raise self.error
        return self.new_accounts.pop(0)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def kv_store():
    """Create an empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def directory(kv_store):
    """Create an account directory over the in-memory store."""
    return AccountDirectory(kv_store)


@pytest.fixture
def sample_token():
    """Sample stored token payload."""
    return {
        "accessToken": "ya29.test_access_token",
        "refreshToken": "1//test_refresh_token",
        "expiresAt": 1_900_000_000_000,
        "scope": "https://www.googleapis.com/auth/gmail.readonly",
        "tokenType": "Bearer",
    }


@pytest.fixture
def env_override(monkeypatch):
    """Helper to override environment variables."""

    def _override(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)

    return _override
