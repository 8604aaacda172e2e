"""``--debug`` / ``ZOHO_DEBUG=1`` log every pdauth invocation to stderr."""

import json
import subprocess
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from zoho_mail.cli.main import cli

_FOLDERS = {"status": {"code": 200, "description": "success"}, "data": [{"folderId": "1", "folderName": "Inbox"}]}


def _fake_pdauth(argv, *, stdout, **kwargs):
    stdout.write(json.dumps(_FOLDERS).encode())
    return subprocess.CompletedProcess(argv, 0)


@pytest.fixture
def run_cli(write_config, bridge):
    write_config(accountId="acc1", userId="u1")

    def _run(*args: str):
        with patch("zoho_mail.cli.main.load_dotenv"), patch(
            "zoho_mail.cli.main.AuthBridge", return_value=bridge
        ), patch("zoho_mail.pdauth.transport.subprocess.run", side_effect=_fake_pdauth):
            return CliRunner().invoke(cli, list(args), catch_exceptions=False)

    return _run


class TestDebugLogging:
    def test_debug_flag_logs_proxy_invocation(self, run_cli) -> None:
        result = run_cli("--debug", "folders", "list")
        assert result.exit_code == 0
        assert "DEBUG" in result.output
        assert "zoho_mail.pdauth.transport" in result.output
        assert "pdauth → ['pdauth', 'proxy', 'zoho_mail', 'https://mail.zoho.com/api/accounts/acc1/folders'" in result.output
        assert "exit 0" in result.output

    def test_env_var_enables_debug(self, run_cli, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ZOHO_DEBUG", "1")
        result = run_cli("folders", "list")
        assert result.exit_code == 0
        assert "pdauth → " in result.output

    def test_nothing_logged_without_flag(self, run_cli) -> None:
        result = run_cli("folders", "list")
        assert result.exit_code == 0
        assert "Inbox" in result.output
        assert "pdauth → " not in result.output
        assert "DEBUG" not in result.output
