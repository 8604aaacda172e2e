"""Tests for Settings.from_env."""

from pathlib import Path

import pytest

from zoho_mail.config.settings import Settings, default_config_path
from zoho_mail.errors import ValidationError


class TestSettingsFromEnv:
    def test_defaults(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ZOHO_MAIL_CONFIG")
        settings = Settings.from_env()
        assert settings.pdauth_bin == "pdauth"
        assert settings.app_slug == "zoho_mail"
        assert settings.timeout == 60
        assert settings.max_output_bytes == 10 * 1024 * 1024
        assert settings.transport == "proxy"
        assert settings.mcp_command[:2] == ["npx", "-y"]
        assert settings.max_attempts == 3
        assert settings.config_path == default_config_path()
        assert settings.debug is False

    def test_overrides(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PDAUTH_BIN", "/usr/local/bin/pdauth")
        monkeypatch.setenv("ZOHO_MAIL_TIMEOUT", "5")
        monkeypatch.setenv("ZOHO_MAIL_TRANSPORT", " MCP ")
        monkeypatch.setenv("ZOHO_MAIL_MCP_COMMAND", "node 'my server.js'")
        monkeypatch.setenv("ZOHO_MAIL_MAX_ATTEMPTS", "0")
        monkeypatch.setenv("ZOHO_DEBUG", "1")
        settings = Settings.from_env()
        assert settings.pdauth_bin == "/usr/local/bin/pdauth"
        assert settings.timeout == 5
        assert settings.transport == "mcp"
        assert settings.mcp_command == ["node", "my server.js"]
        assert settings.max_attempts == 1
        assert settings.config_path == config_path
        assert settings.debug is True

    def test_non_integer_timeout(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ZOHO_MAIL_TIMEOUT", "soon")
        with pytest.raises(ValidationError, match="ZOHO_MAIL_TIMEOUT"):
            Settings.from_env()
