"""Tests for the ``auth`` command group."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from zoho_mail.cli.main import cli


class TestStatus:
    def test_json_when_connected(self, invoke, config_path) -> None:
        result = invoke("auth", "status", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "connected": True,
            "account": "zoho_mail",
            "healthy": True,
            "userId": "",
            "region": "zoho.com",
            "accountId": "",
            "configPath": str(config_path),
        }

    def test_global_json_flag(self, invoke, write_config) -> None:
        write_config(userId="u1", accountId="123", region="zoho.eu")
        result = invoke("--json", "auth", "status")
        payload = json.loads(result.output)
        assert payload["userId"] == "u1"
        assert payload["accountId"] == "123"
        assert payload["region"] == "zoho.eu"

    def test_table_when_not_connected(self, invoke, bridge) -> None:
        bridge.check_connection.return_value = None
        result = invoke("auth", "status")
        assert result.exit_code == 0
        assert "Not connected" in result.output
        assert "(not set)" in result.output

    def test_missing_pdauth_reports_not_connected(self, config_path, monkeypatch) -> None:
        monkeypatch.setenv("PDAUTH_BIN", str(config_path.parent / "no-such-pdauth"))
        with patch("zoho_mail.cli.main.load_dotenv"):
            result = CliRunner().invoke(cli, ["auth", "status", "--json"], catch_exceptions=False)
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["connected"] is False
        assert payload["account"] is None
        assert payload["accountId"] == ""


class TestLogin:
    def test_already_connected(self, invoke, bridge, config_path) -> None:
        result = invoke("auth", "login")
        assert result.exit_code == 0
        assert "Already connected" in result.output
        bridge.generate_connect_link.assert_not_called()
        assert json.loads(config_path.read_text())["userId"] == "default"

    def test_prints_connect_link(self, invoke, bridge) -> None:
        bridge.check_connection.return_value = None
        result = invoke("auth", "login", "--user", "alice")
        assert result.exit_code == 0
        assert "https://pipedream.com/_static/connect.html?token=abc" in result.output
        bridge.generate_connect_link.assert_called_once_with("alice")

    def test_no_link_is_an_error(self, invoke, bridge) -> None:
        bridge.check_connection.return_value = None
        bridge.generate_connect_link.return_value = None
        result = invoke("auth", "login")
        assert result.exit_code == 1
        assert "Failed to generate OAuth link" in result.output

    def test_region_is_stored(self, invoke, config_path) -> None:
        result = invoke("auth", "login", "--region", "zoho.in")
        assert result.exit_code == 0
        assert json.loads(config_path.read_text())["region"] == "zoho.in"

    def test_invalid_region_fails_before_contacting_pdauth(self, invoke, bridge) -> None:
        result = invoke("auth", "login", "--region", "zoho.moon")
        assert result.exit_code == 1
        assert "Invalid region" in result.output
        bridge.check_connection.assert_not_called()


class TestLogout:
    def test_requires_force(self, invoke, bridge) -> None:
        result = invoke("auth", "logout")
        assert result.exit_code == 0
        assert "Run with --force to confirm." in result.output
        bridge.disconnect.assert_not_called()

    def test_force_disconnects_and_clears_config(self, invoke, bridge, write_config) -> None:
        path = write_config(userId="u1", accountId="123")
        result = invoke("auth", "logout", "--force")
        assert result.exit_code == 0
        assert "Disconnected" in result.output
        bridge.disconnect.assert_called_once_with("u1")
        assert not path.exists()

    def test_failed_disconnect_keeps_config_and_hints(self, invoke, bridge, write_config) -> None:
        path = write_config(userId="u1", accountId="123")
        bridge.disconnect.return_value = False
        result = invoke("auth", "logout", "--force")
        assert result.exit_code == 1
        assert "Try running: pdauth disconnect zoho_mail --user default" in result.output
        assert path.exists()

    def test_not_connected(self, invoke, bridge) -> None:
        bridge.check_connection.return_value = None
        result = invoke("auth", "logout", "--force")
        assert result.exit_code == 0
        assert "Not currently connected" in result.output
        bridge.disconnect.assert_not_called()


class TestConfigCommands:
    def test_set_region(self, invoke, config_path) -> None:
        result = invoke("auth", "set-region", "zoho.com.au")
        assert result.exit_code == 0
        assert json.loads(config_path.read_text())["region"] == "zoho.com.au"

    def test_set_region_invalid(self, invoke, config_path) -> None:
        result = invoke("auth", "set-region", "zoho.xyz")
        assert result.exit_code == 1
        assert "Valid options" in result.output
        assert not config_path.exists()

    def test_set_account(self, invoke, config_path) -> None:
        result = invoke("auth", "set-account", "555")
        assert result.exit_code == 0
        assert json.loads(config_path.read_text())["accountId"] == "555"


class TestAccounts:
    def test_lists_accounts_as_json(self, invoke, transport) -> None:
        transport.reply([{"accountId": "111", "emailAddress": "me@example.com"}])
        result = invoke("auth", "accounts", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output)[0]["account_id"] == "111"
        assert transport.calls[0].path == "/accounts"

    def test_not_connected(self, invoke, bridge, transport) -> None:
        bridge.check_connection.return_value = None
        result = invoke("auth", "accounts")
        assert result.exit_code == 1
        assert "Not connected to Zoho Mail" in result.output
        assert "zoho-mail auth login" in result.output
        assert transport.calls == []
