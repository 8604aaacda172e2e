"""Shared pytest fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, NamedTuple
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner, Result

from zoho_mail.pdauth.transport import RawResponse
from zoho_mail.pdauth.types import REST_CAPABILITIES, Capability, ConnectionStatus

_ENV_VARS = (
    "PDAUTH_BIN",
    "PDAUTH_APP",
    "ZOHO_DEBUG",
    "ZOHO_MAIL_TIMEOUT",
    "ZOHO_MAIL_MAX_OUTPUT",
    "ZOHO_MAIL_TRANSPORT",
    "ZOHO_MAIL_MCP_COMMAND",
    "ZOHO_MAIL_MCP_TOOL",
    "ZOHO_MAIL_MAX_ATTEMPTS",
)


class Call(NamedTuple):
    method: str
    path: str
    query: dict[str, str] | None
    body: dict[str, Any] | None


class FakeTransport:
    """In-memory stand-in for the pdauth proxy.

    Replies are queued with :meth:`reply` and consumed in order; once the
    queue is empty every request answers ``200`` with ``data: null``.
    """

    name = "fake"

    def __init__(self, capabilities: frozenset[Capability] = REST_CAPABILITIES) -> None:
        self.capabilities = capabilities
        self.calls: list[Call] = []
        self._replies: list[str] = []

    def reply(
        self,
        data: Any = None,
        *,
        code: int = 200,
        description: str = "success",
        noise: str = "",
    ) -> "FakeTransport":
        envelope = {"status": {"code": code, "description": description}, "data": data}
        self._replies.append(noise + json.dumps(envelope))
        return self

    def reply_raw(self, text: str) -> "FakeTransport":
        self._replies.append(text)
        return self

    def request(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> RawResponse:
        self.calls.append(Call(method, path, query, body))
        if self._replies:
            return RawResponse(self._replies.pop(0))
        return RawResponse(json.dumps({"status": {"code": 200, "description": "success"}, "data": None}))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at an empty per-test config file and a clean environment."""
    path = tmp_path / "zoho" / "config.json"
    monkeypatch.setenv("ZOHO_MAIL_CONFIG", str(path))
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return path


@pytest.fixture
def write_config(config_path: Path) -> Callable[..., Path]:
    def _write(**values: str) -> Path:
        data = {"region": "zoho.com", "accountId": "", "userId": "", "defaultFolder": "Inbox"}
        data.update(values)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data))
        return config_path

    return _write


@pytest.fixture
def bridge() -> MagicMock:
    """An AuthBridge double that reports a healthy connection."""
    b = MagicMock()
    b.check_connection.return_value = ConnectionStatus(
        connected=True, account_name="zoho_mail", healthy=True, account_id="apn_123"
    )
    b.generate_connect_link.return_value = "https://pipedream.com/_static/connect.html?token=abc"
    b.disconnect.return_value = True
    b.disconnect_command.return_value = "pdauth disconnect zoho_mail --user default"
    return b


@pytest.fixture
def invoke(
    config_path: Path, bridge: MagicMock, transport: FakeTransport
) -> Callable[..., Result]:
    """Run the CLI with the bridge and transport replaced by doubles."""

    def _invoke(*args: str) -> Result:
        from zoho_mail.cli.main import cli

        runner = CliRunner()
        with patch("zoho_mail.cli.main.load_dotenv"), patch(
            "zoho_mail.cli.main.AuthBridge", return_value=bridge
        ), patch(
            "zoho_mail.cli.main.build_transport",
            side_effect=lambda settings, config, user_id: transport,
        ):
            return runner.invoke(cli, list(args), catch_exceptions=False)

    return _invoke
