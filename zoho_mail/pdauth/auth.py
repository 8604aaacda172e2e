"""Auth Bridge — connection probe, connect link and disconnect via ``pdauth``.

``pdauth`` output is not a stable contract: depending on the helper version
``status --json`` prints a JSON document (possibly after a "- Fetching..."
spinner line) or plain text. Every parse step here degrades to "not
connected" instead of raising, so ``auth status`` can never crash.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from zoho_mail.errors import ProcessError
from zoho_mail.pdauth.transport import ProcessResult, extract_json_block, run_pdauth
from zoho_mail.pdauth.types import ConnectionStatus, as_bool

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"https://[^\s'\"<>]+")
_ACCOUNT_ID_RE = re.compile(r"Account ID:\s*(apn_\w+)")


class AuthBridge:
    """Maps a CLI user id onto the proxy's notion of a Zoho Mail connection."""

    def __init__(
        self,
        *,
        pdauth_bin: str = "pdauth",
        app_slug: str = "zoho_mail",
        timeout: float = 60,
        max_output_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self._bin = pdauth_bin
        self._app = app_slug
        self._timeout = timeout
        self._max_output = max_output_bytes

    # ── Public API ─────────────────────────────────────────────────────────────

    def check_connection(self, user_id: str) -> ConnectionStatus | None:
        """Return the Zoho Mail connection for ``user_id``, or None.

        Tries ``status --json`` first; if that invocation fails or prints no
        JSON (or JSON without an ``accounts`` list), falls back to scanning the
        plain-text ``status`` output.
        """
        try:
            result = self._run(["status", "--user", user_id, "--json"])
        except ProcessError as exc:
            logger.debug("pdauth status --json failed: %s", exc)
            return self._check_connection_text(user_id)

        if result.returncode == 0:
            document = extract_json_block(result.output)
            if document is not None and isinstance(document.get("accounts"), list):
                return self._parse_status_json(document["accounts"])
        logger.debug("pdauth status --json unusable (exit %d); trying text", result.returncode)
        return self._check_connection_text(user_id)

    def generate_connect_link(self, user_id: str) -> str | None:
        """Ask the proxy for an OAuth connect link and return the first URL in its output."""
        try:
            result = self._run(["connect", self._app, "--user", user_id])
        except ProcessError as exc:
            logger.debug("pdauth connect failed: %s", exc)
            return None
        if result.returncode != 0:
            logger.debug("pdauth connect exited with %d", result.returncode)
            return None
        match = _URL_RE.search(result.output)
        return match.group(0) if match else None

    def disconnect(self, user_id: str) -> bool:
        """Remove the connection (forced, no prompt). False on any failure."""
        try:
            result = self._run(["disconnect", self._app, "--user", user_id, "--force"])
        except ProcessError as exc:
            logger.debug("pdauth disconnect failed: %s", exc)
            return False
        return result.returncode == 0

    def disconnect_command(self, user_id: str) -> str:
        """The manual command to suggest when :meth:`disconnect` fails."""
        return f"{self._bin} disconnect {self._app} --user {user_id}"

    # ── Internal helpers ───────────────────────────────────────────────────────

    def _run(self, args: list[str]) -> ProcessResult:
        return run_pdauth(
            [self._bin, *args],
            timeout=self._timeout,
            max_output_bytes=self._max_output,
        )

    def _check_connection_text(self, user_id: str) -> ConnectionStatus | None:
        try:
            result = self._run(["status", "--user", user_id])
        except ProcessError as exc:
            logger.debug("pdauth status failed: %s", exc)
            return None
        return self._parse_status_text(result.output)

    def _parse_status_json(self, accounts: list[Any]) -> ConnectionStatus | None:
        for account in accounts:
            if not isinstance(account, dict):
                continue
            app = account.get("app")
            if isinstance(app, dict) and app.get("nameSlug") == self._app:
                return ConnectionStatus(
                    connected=True,
                    account_name=str(account.get("name") or self._app),
                    healthy=as_bool(account.get("healthy")),
                    account_id=str(account.get("id", "")),
                    raw=account,
                )
        return None

    def _parse_status_text(self, output: str) -> ConnectionStatus | None:
        """Freeform output: connected iff the app slug and "healthy" both appear."""
        lowered = output.lower()
        if self._app not in output or "healthy" not in lowered:
            return None
        match = _ACCOUNT_ID_RE.search(output)
        return ConnectionStatus(
            connected=True,
            account_name=self._app,
            healthy="unhealthy" not in lowered,
            account_id=match.group(1) if match else "",
        )
