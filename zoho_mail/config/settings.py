"""Runtime settings read from the environment (after ``load_dotenv``)."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

import click

from zoho_mail.errors import ValidationError

APP_NAME = "zoho-mail-cli"

_DEFAULT_MCP_COMMAND = "npx -y @pipedream/mcp stdio --app zoho_mail"


def default_config_path() -> Path:
    """Per-user config location, e.g. ``~/.config/zoho-mail-cli/config.json``."""
    return Path(click.get_app_dir(APP_NAME)) / "config.json"


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class Settings:
    """Knobs for the external helper and transport selection."""

    pdauth_bin: str = "pdauth"
    app_slug: str = "zoho_mail"
    timeout: int = 60
    max_output_bytes: int = 10 * 1024 * 1024
    transport: str = "proxy"
    mcp_command: list[str] = field(default_factory=lambda: shlex.split(_DEFAULT_MCP_COMMAND))
    mcp_tool: str = "zoho_mail-send-email"
    max_attempts: int = 3
    config_path: Path = field(default_factory=default_config_path)
    debug: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from environment variables."""
        config_path = os.environ.get("ZOHO_MAIL_CONFIG", "")
        return cls(
            pdauth_bin=os.environ.get("PDAUTH_BIN", "pdauth"),
            app_slug=os.environ.get("PDAUTH_APP", "zoho_mail"),
            timeout=_int_env("ZOHO_MAIL_TIMEOUT", 60),
            max_output_bytes=_int_env("ZOHO_MAIL_MAX_OUTPUT", 10 * 1024 * 1024),
            transport=os.environ.get("ZOHO_MAIL_TRANSPORT", "proxy").strip().lower(),
            mcp_command=shlex.split(
                os.environ.get("ZOHO_MAIL_MCP_COMMAND", _DEFAULT_MCP_COMMAND)
            ),
            mcp_tool=os.environ.get("ZOHO_MAIL_MCP_TOOL", "zoho_mail-send-email"),
            max_attempts=max(1, _int_env("ZOHO_MAIL_MAX_ATTEMPTS", 3)),
            config_path=Path(config_path) if config_path else default_config_path(),
            debug=os.environ.get("ZOHO_DEBUG", "") == "1",
        )
