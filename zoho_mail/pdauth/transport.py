"""Credentialed transport — issues Zoho REST calls through the ``pdauth`` OAuth proxy.

The CLI never holds a Zoho token. Every request is handed to the external
``pdauth`` helper, which owns the OAuth credential and forwards the call:

    pdauth proxy zoho_mail <url> --user <id> -X <METHOD> -q k=v ... -d '<json>'

The helper prints spinner/status lines around the JSON body, so callers scan
the output with :func:`extract_json_block` rather than parsing it whole.

Invocations are synchronous, bounded by a timeout, and their combined
stdout/stderr is spooled to a temporary file so a misbehaving helper cannot
grow memory without limit.
"""

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Any, Protocol

from zoho_mail.errors import ProcessError
from zoho_mail.pdauth.types import REST_CAPABILITIES, Capability

logger = logging.getLogger(__name__)

_DECODER = json.JSONDecoder()


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    output: str


@dataclass(frozen=True)
class RawResponse:
    """Unparsed helper output for one request."""

    text: str


class CredentialedTransport(Protocol):
    """Anything that can carry an authenticated Zoho REST call."""

    name: str
    capabilities: frozenset[Capability]

    def request(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> RawResponse: ...


def run_pdauth(
    argv: list[str],
    *,
    timeout: float,
    max_output_bytes: int,
) -> ProcessResult:
    """Run one helper invocation and return its exit code and merged output.

    Raises ProcessError if the executable is missing, the call times out, or
    the output exceeds ``max_output_bytes``. A non-zero exit is *not* an
    error here; callers decide what it means.
    """
    logger.debug("pdauth → %s", argv)
    with tempfile.TemporaryFile() as spool:
        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=spool,
                stderr=subprocess.STDOUT,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ProcessError(f"{argv[0]} not found on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise ProcessError(f"{argv[0]} timed out after {timeout:g}s") from exc
        except OSError as exc:
            raise ProcessError(f"Could not run {argv[0]}: {exc}") from exc

        size = spool.tell()
        if size > max_output_bytes:
            raise ProcessError(
                f"{argv[0]} produced {size} bytes of output (limit {max_output_bytes})"
            )
        spool.seek(0)
        output = spool.read().decode("utf-8", errors="replace")

    logger.debug("pdauth ← exit %d, %d bytes", completed.returncode, len(output))
    return ProcessResult(returncode=completed.returncode, output=output)


def extract_json_block(text: str) -> dict[str, Any] | None:
    """Return the first balanced ``{...}`` object in ``text``, skipping noise.

    Tries every ``{`` in order and keeps the first position from which a
    complete JSON object decodes.
    """
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, dict):
                return value
        start = text.find("{", start + 1)
    return None


def _tail(output: str, limit: int = 300) -> str:
    output = output.strip()
    return output if len(output) <= limit else "…" + output[-limit:]


class PdauthProxyTransport:
    """Structured REST calls via ``pdauth proxy`` — reaches every endpoint."""

    name = "pdauth proxy"
    capabilities: frozenset[Capability] = REST_CAPABILITIES

    def __init__(
        self,
        user_id: str,
        base_url: str,
        *,
        pdauth_bin: str = "pdauth",
        app_slug: str = "zoho_mail",
        timeout: float = 60,
        max_output_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self._user_id = user_id
        self._base_url = base_url.rstrip("/")
        self._bin = pdauth_bin
        self._app = app_slug
        self._timeout = timeout
        self._max_output = max_output_bytes

    def build_argv(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> list[str]:
        argv = [
            self._bin, "proxy", self._app, f"{self._base_url}{path}",
            "--user", self._user_id,
            "-X", method.upper(),
        ]
        for key, value in (query or {}).items():
            argv += ["-q", f"{key}={value}"]
        if body is not None:
            argv += ["-d", json.dumps(body, separators=(",", ":"))]
        return argv

    def request(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> RawResponse:
        result = run_pdauth(
            self.build_argv(method, path, query, body),
            timeout=self._timeout,
            max_output_bytes=self._max_output,
        )
        if result.returncode != 0:
            raise ProcessError(
                f"pdauth proxy exited with status {result.returncode}: {_tail(result.output)}"
            )
        return RawResponse(text=result.output)
