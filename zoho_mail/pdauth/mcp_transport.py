"""Legacy send-only transport — free-text instructions to a single MCP tool.

Older helper setups expose Zoho Mail only as an MCP server whose tools take a
natural-language ``instruction`` instead of structured REST arguments. The
only action that works end-to-end through it is sending mail, so this
transport advertises exactly that capability; the API client refuses every
other operation before a call is attempted.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

import anyio
from mcp import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client
from mcp.shared.exceptions import McpError
from mcp.types import TextContent

from zoho_mail.errors import CapabilityNotSupported, ProcessError
from zoho_mail.pdauth.transport import RawResponse, extract_json_block
from zoho_mail.pdauth.types import Capability

logger = logging.getLogger(__name__)

_SEND_PATH = re.compile(r"/accounts/[^/]+/messages")

SessionFactory = Callable[[], AbstractAsyncContextManager[ClientSession]]


def build_send_instruction(body: dict[str, Any]) -> str:
    """Render a send-mail request body as the instruction text the tool expects."""
    parts = [
        f"Send an email to {body['toAddress']}",
        f"with the subject {json.dumps(body.get('subject', ''))}",
    ]
    if body.get("ccAddress"):
        parts.append(f"CC {body['ccAddress']}")
    if body.get("bccAddress"):
        parts.append(f"BCC {body['bccAddress']}")
    fmt = "HTML" if body.get("mailFormat") == "html" else "plain text"
    parts.append(f"as {fmt}, and exactly this body:\n\n{body.get('content', '')}")
    return ", ".join(parts[:-1]) + " " + parts[-1]


class McpInstructionTransport:
    """Send-only transport backed by an MCP server launched over stdio."""

    name = "MCP instruction"
    capabilities: frozenset[Capability] = frozenset({Capability.SEND_EMAIL})

    def __init__(
        self,
        user_id: str,
        *,
        command: list[str],
        tool: str,
        timeout: float = 60,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._user_id = user_id
        self._command = command
        self._tool = tool
        self._timeout = timeout
        self._session_factory = session_factory or self._stdio_session

    def request(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> RawResponse:
        if method.upper() != "POST" or body is None or not _SEND_PATH.fullmatch(path):
            raise CapabilityNotSupported(f"{method.upper()} {path}", transport=self.name)

        instruction = build_send_instruction(body)
        try:
            envelope = asyncio.run(self._call(instruction))
        except TimeoutError as exc:
            raise ProcessError(f"MCP tool {self._tool!r} timed out after {self._timeout:g}s") from exc
        except (OSError, McpError) as exc:
            raise ProcessError(f"MCP server failed: {exc}") from exc
        except ExceptionGroup as exc:
            raise ProcessError(f"MCP server failed: {exc.exceptions[0]}") from exc
        return RawResponse(text=json.dumps(envelope))

    # ── Internal helpers ───────────────────────────────────────────────────────

    async def _call(self, instruction: str) -> dict[str, Any]:
        """Call the tool and wrap its answer in Zoho's ``{status, data}`` envelope."""
        logger.debug("MCP → %s %r", self._tool, instruction)
        with anyio.fail_after(self._timeout):
            async with self._session_factory() as session:
                result = await session.call_tool(self._tool, {"instruction": instruction})

        text = next(
            (item.text for item in result.content or [] if isinstance(item, TextContent)),
            "",
        )
        logger.debug("MCP ← %.200s", text)
        if result.isError:
            return {"status": {"code": 500, "description": text or "tool error"}, "data": None}

        document = extract_json_block(text)
        if document is not None and isinstance(document.get("status"), dict):
            return document
        return {"status": {"code": 200, "description": "success"}, "data": document or text}

    @asynccontextmanager
    async def _stdio_session(self) -> AsyncIterator[ClientSession]:
        command, *args = self._command
        params = StdioServerParameters(
            command=command,
            args=[*args, "--external-user-id", self._user_id],
            env={**os.environ, "PIPEDREAM_EXTERNAL_USER_ID": self._user_id},
        )
        async with stdio_client(params) as (read, write):
            async with ClientSession(read, write) as session:
                await session.initialize()
                yield session
