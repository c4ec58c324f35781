"""Tests for environment-driven configuration."""

import os

import pytest

from auth.config import AccountsConfig, get_accounts_config, get_store_directory, reload_accounts_config
from core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(env_override):
    def _clear():
        env_override(
            ACCOUNTS_MCP_STORE=None,
            ACCOUNTS_MCP_STORE_DIR=None,
            ACCOUNTS_MCP_SERIALIZE_WRITES=None,
            ACCOUNTS_MCP_SERVICES=None,
        )

    _clear()
    yield
    # monkeypatch restores the environment after this teardown runs
    _clear()
    reload_accounts_config()


class TestAccountsConfig:
    """Tests for AccountsConfig."""

    def test_defaults(self):
        config = AccountsConfig()

        assert config.store_backend == "file"
        assert config.store_dir == os.path.expanduser("~/.config/accounts-mcp")
        assert config.serialize_writes is True
        assert config.services == []

    def test_memory_backend(self, env_override):
        env_override(ACCOUNTS_MCP_STORE="Memory")
        assert AccountsConfig().store_backend == "memory"

    def test_invalid_backend_raises(self, env_override):
        env_override(ACCOUNTS_MCP_STORE="redis")
        with pytest.raises(ConfigurationError, match="ACCOUNTS_MCP_STORE"):
            AccountsConfig()

    def test_store_dir_expanded(self, env_override, tmp_path):
        env_override(ACCOUNTS_MCP_STORE_DIR=str(tmp_path / "store"))
        assert AccountsConfig().store_dir == str(tmp_path / "store")

    @pytest.mark.parametrize("value,expected", [("false", False), ("0", False), ("TRUE", True), ("yes", True)])
    def test_serialize_writes_flag(self, env_override, value, expected):
        env_override(ACCOUNTS_MCP_SERIALIZE_WRITES=value)
        assert AccountsConfig().serialize_writes is expected

    def test_services_parsed_and_deduplicated(self, env_override):
        env_override(ACCOUNTS_MCP_SERVICES="gmail, drive,,gmail ,calendar")
        assert AccountsConfig().services == ["gmail", "drive", "calendar"]

    def test_environment_summary(self, env_override):
        env_override(ACCOUNTS_MCP_STORE="memory", ACCOUNTS_MCP_SERVICES="gmail")
        summary = AccountsConfig().get_environment_summary()

        assert summary["store_backend"] == "memory"
        assert summary["services"] == ["gmail"]


class TestGlobalConfig:
    """Tests for the configuration singleton."""

    def test_get_is_cached(self):
        reload_accounts_config()
        assert get_accounts_config() is get_accounts_config()

    def test_reload_picks_up_environment(self, env_override, tmp_path):
        reload_accounts_config()
        env_override(ACCOUNTS_MCP_STORE_DIR=str(tmp_path))

        assert get_store_directory() != str(tmp_path)
        reload_accounts_config()
        assert get_store_directory() == str(tmp_path)

    def test_failed_reload_keeps_previous_config(self, env_override):
        previous = reload_accounts_config()
        env_override(ACCOUNTS_MCP_STORE="redis")

        with pytest.raises(ConfigurationError):
            reload_accounts_config()
        assert get_accounts_config() is previous
