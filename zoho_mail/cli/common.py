"""Shared plumbing for the command groups: context object, auth/account guards, error reporting."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import click
from rich.markup import escape

from zoho_mail.config.settings import Settings
from zoho_mail.config.store import DEFAULT_USER_ID, ConfigStore, ZohoConfig
from zoho_mail.errors import ApiError, AuthRequired, TransportError, ValidationError, ZohoMailError
from zoho_mail.output.formatter import OutputFormat, err_console, error, warn
from zoho_mail.pdauth.auth import AuthBridge
from zoho_mail.pdauth.client import ZohoMailClient
from zoho_mail.pdauth.mcp_transport import McpInstructionTransport
from zoho_mail.pdauth.transport import CredentialedTransport, PdauthProxyTransport
from zoho_mail.pdauth.types import Capability, ConnectionStatus

logger = logging.getLogger(__name__)

TransportFactory = Callable[[Settings, ZohoConfig, str], CredentialedTransport]

# Stands in for the account id when the transport cannot look one up.
_UNRESOLVED_ACCOUNT = "default"

_SET_ACCOUNT_HINT = "Run `zoho-mail auth set-account <accountId>` to set it manually"


def build_transport(settings: Settings, config: ZohoConfig, user_id: str) -> CredentialedTransport:
    """Pick the transport named by ``ZOHO_MAIL_TRANSPORT``."""
    if settings.transport == "proxy":
        return PdauthProxyTransport(
            user_id,
            config.base_url,
            pdauth_bin=settings.pdauth_bin,
            app_slug=settings.app_slug,
            timeout=settings.timeout,
            max_output_bytes=settings.max_output_bytes,
        )
    if settings.transport == "mcp":
        return McpInstructionTransport(
            user_id,
            command=settings.mcp_command,
            tool=settings.mcp_tool,
            timeout=settings.timeout,
        )
    raise ValidationError(
        f"Unknown transport {settings.transport!r} (expected 'proxy' or 'mcp')"
    )


@dataclass
class AppContext:
    """Everything a command needs; stored on ``ctx.obj`` by the root group."""

    settings: Settings
    store: ConfigStore
    bridge: AuthBridge
    transport_factory: TransportFactory = build_transport
    output: OutputFormat = OutputFormat.TABLE
    _client: ZohoMailClient | None = field(default=None, init=False, repr=False)
    _config: ZohoConfig | None = field(default=None, init=False, repr=False)

    @property
    def config(self) -> ZohoConfig:
        """The persisted config, read from disk once per invocation."""
        if self._config is None:
            self._config = self.store.get()
        return self._config

    @property
    def user_id(self) -> str:
        return self.config.user_id or DEFAULT_USER_ID

    def update_config(self, **fields: str) -> ZohoConfig:
        """Persist ``fields`` and keep the cached record in step."""
        self._config = self.store.set(**fields)
        return self._config

    def clear_config(self) -> None:
        self.store.clear()
        self._config = None

    @property
    def client(self) -> ZohoMailClient:
        if self._client is None:
            transport = self.transport_factory(self.settings, self.config, self.user_id)
            self._client = ZohoMailClient(transport, max_attempts=self.settings.max_attempts)
        return self._client

    def output_format(self, as_json: bool = False) -> OutputFormat:
        return OutputFormat.JSON if as_json else self.output

    def require_auth(self) -> ConnectionStatus:
        status = self.bridge.check_connection(self.user_id)
        if status is None:
            raise AuthRequired("Not connected to Zoho Mail")
        if not status.healthy:
            warn(f"Zoho Mail connection {escape(status.account_name)} is reported unhealthy")
        return status

    def ensure_account_id(self) -> str:
        """Configured account id, else the first account on the connection (persisted)."""
        account_id = self.config.account_id
        if account_id:
            return account_id
        if not self.client.supports(Capability.LIST_ACCOUNTS):
            return _UNRESOLVED_ACCOUNT
        try:
            account_id = self.client.get_account_id()
        except (ApiError, TransportError) as exc:
            raise ZohoMailError(
                f"Could not detect account ID: {exc}", hint=_SET_ACCOUNT_HINT
            ) from exc
        self.update_config(account_id=account_id)
        logger.info("Detected Zoho account %s", account_id)
        return account_id

    def connect(self) -> str:
        """Auth check plus account resolution; returns the account id."""
        self.require_auth()
        return self.ensure_account_id()

    def resolve_folder_id(self, account_id: str, folder_id: str | None) -> str:
        if folder_id:
            return folder_id
        return self.client.find_folder(account_id, self.config.default_folder).folder_id


@contextmanager
def reporting(action: str) -> Iterator[None]:
    """Print ``✗ action: message`` plus a remediation hint and exit 1 on ZohoMailError."""
    try:
        yield
    except ZohoMailError as exc:
        error(f"{escape(action)}: {escape(str(exc))}")
        if exc.hint:
            err_console.print(f"  {escape(exc.hint)}", style="dim")
        logger.debug("%s failed", action, exc_info=True)
        raise SystemExit(1) from exc


def confirm_or_warn(force: bool, warning: str, detail: str) -> bool:
    """Destructive-operation gate: without --force print a warning and do nothing."""
    if force:
        return True
    warn(escape(warning))
    err_console.print(detail, style="yellow")
    err_console.print("\nRun with --force to confirm.")
    return False


def json_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option("--json", "as_json", is_flag=True, help="Output as JSON.")(func)


def authenticated(action: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Wrap a command body: check the connection, resolve the account, report errors.

    The wrapped function receives ``(app, account_id, *args, **kwargs)``.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        @click.pass_obj
        def wrapper(app: AppContext, *args: Any, **kwargs: Any) -> Any:
            with reporting(action):
                account_id = app.connect()
                return func(app, account_id, *args, **kwargs)

        return wrapper

    return decorator
