"""Zoho Mail API client — one authenticated REST call per logical operation.

All calls go through a :class:`CredentialedTransport`; the client never talks
to Zoho directly. Responses arrive wrapped in Zoho's envelope::

    {"status": {"code": 200, "description": "success"}, "data": ...}

``data`` is returned only for code 200. Code 429 is retried with exponential
backoff; every other code raises :class:`ApiError` immediately.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from zoho_mail.errors import ApiError, CapabilityNotSupported, TransportError, ValidationError
from zoho_mail.pdauth.transport import CredentialedTransport, extract_json_block
from zoho_mail.pdauth.types import (
    FOLDER_MODES,
    TAG_MODES,
    Account,
    Capability,
    Email,
    EmailContent,
    Folder,
    Label,
    UpdateMode,
)

logger = logging.getLogger(__name__)

_RATE_LIMITED = 429
_DEFAULT_BACKOFF_SECONDS = 1.0


def _page(items: list[Any], limit: int | None, start: int | None) -> list[Any]:
    """Client-side cap/offset for endpoints that return everything at once."""
    offset = max((start or 1) - 1, 0)
    return items[offset:offset + limit] if limit is not None else items[offset:]


def _records(data: Any, what: str) -> list[dict[str, Any]]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise TransportError(f"Expected a list of {what}, got {type(data).__name__}")
    return [item for item in data if isinstance(item, dict)]


def _record(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TransportError(f"Expected a {what} object, got {type(data).__name__}")
    return data


class ZohoMailClient:
    """Typed wrapper around the Zoho Mail REST surface.

    Args:
        transport: carries the request (``pdauth proxy`` or the legacy MCP
            transport). Its ``capabilities`` gate every operation.
        max_attempts: total attempts when Zoho answers 429.
        backoff: base delay in seconds; attempt *n* waits ``backoff * 2**n``.
        sleep: injectable for tests.
    """

    def __init__(
        self,
        transport: CredentialedTransport,
        *,
        max_attempts: int = 3,
        backoff: float = _DEFAULT_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff
        self._sleep = sleep

    @property
    def transport(self) -> CredentialedTransport:
        return self._transport

    def supports(self, capability: Capability) -> bool:
        return capability in self._transport.capabilities

    # ── Accounts ───────────────────────────────────────────────────────────────

    def list_accounts(self, *, limit: int | None = None, start: int | None = None) -> list[Account]:
        self._require(Capability.LIST_ACCOUNTS)
        data = self.proxy_request("GET", "/accounts")
        accounts = [Account.from_api(a) for a in _records(data, "accounts")]
        return _page(accounts, limit, start)

    def get_account_id(self) -> str:
        """Return the id of the first mail account on the connection."""
        accounts = self.list_accounts()
        if not accounts:
            raise ApiError("No Zoho Mail accounts found")
        return accounts[0].account_id

    # ── Folders ────────────────────────────────────────────────────────────────

    def list_folders(
        self, account_id: str, *, limit: int | None = None, start: int | None = None
    ) -> list[Folder]:
        self._require(Capability.LIST_FOLDERS)
        data = self.proxy_request("GET", f"/accounts/{account_id}/folders")
        folders = [Folder.from_api(f) for f in _records(data, "folders")]
        return _page(folders, limit, start)

    def find_folder(self, account_id: str, name_or_type: str) -> Folder:
        """Resolve a folder by type ("Inbox") or name, case-insensitively."""
        wanted = name_or_type.lower()
        folders = self.list_folders(account_id)
        for folder in folders:
            if folder.folder_type.lower() == wanted:
                return folder
        for folder in folders:
            if folder.folder_name.lower() == wanted:
                return folder
        raise ApiError(f"{name_or_type} folder not found")

    def create_folder(self, account_id: str, name: str, parent_id: str | None = None) -> Folder:
        self._require(Capability.CREATE_FOLDER)
        if not name:
            raise ValidationError("Folder name is required")
        body: dict[str, Any] = {"folderName": name}
        if parent_id:
            body["parentFolderId"] = parent_id
        data = self.proxy_request("POST", f"/accounts/{account_id}/folders", body=body)
        return Folder.from_api(_record(data, "folder"))

    def rename_folder(self, account_id: str, folder_id: str, new_name: str) -> Folder:
        if not new_name:
            raise ValidationError("New folder name is required")
        data = self._update_folder(
            account_id, folder_id, {"mode": "renameFolder", "folderName": new_name}
        )
        if isinstance(data, dict) and data:
            return Folder.from_api(data)
        return Folder(folder_id=folder_id, folder_name=new_name)

    def move_folder(self, account_id: str, folder_id: str, parent_id: str) -> None:
        if not parent_id:
            raise ValidationError("Destination parent folder id is required")
        self._update_folder(account_id, folder_id, {"mode": "move", "parentFolderId": parent_id})

    def empty_folder(self, account_id: str, folder_id: str) -> None:
        self._update_folder(account_id, folder_id, {"mode": "emptyFolder"})

    def mark_folder_read(self, account_id: str, folder_id: str) -> None:
        self._update_folder(account_id, folder_id, {"mode": "markAsRead"})

    def delete_folder(self, account_id: str, folder_id: str) -> None:
        self._require(Capability.DELETE_FOLDER)
        self.proxy_request("DELETE", f"/accounts/{account_id}/folders/{folder_id}")

    # ── Labels ─────────────────────────────────────────────────────────────────

    def list_labels(
        self, account_id: str, *, limit: int | None = None, start: int | None = None
    ) -> list[Label]:
        self._require(Capability.LIST_LABELS)
        data = self.proxy_request("GET", f"/accounts/{account_id}/labels")
        labels = [Label.from_api(lbl) for lbl in _records(data, "labels")]
        return _page(labels, limit, start)

    def create_label(self, account_id: str, name: str, color: str | None = None) -> Label:
        self._require(Capability.CREATE_LABEL)
        if not name:
            raise ValidationError("Label name is required")
        body: dict[str, Any] = {"labelName": name}
        if color:
            body["color"] = color
        data = self.proxy_request("POST", f"/accounts/{account_id}/labels", body=body)
        return Label.from_api(_record(data, "label"))

    def update_label(
        self,
        account_id: str,
        label_id: str,
        *,
        name: str | None = None,
        color: str | None = None,
    ) -> Label:
        self._require(Capability.UPDATE_LABEL)
        if not name and not color:
            raise ValidationError("Provide at least --name or --color to update")
        body: dict[str, Any] = {}
        if name:
            body["displayName"] = name
        if color:
            body["color"] = color
        data = self.proxy_request("PUT", f"/accounts/{account_id}/labels/{label_id}", body=body)
        if isinstance(data, dict) and data:
            return Label.from_api(data)
        return Label(label_id=label_id, label_name=name or "", color=color or "")

    def delete_label(self, account_id: str, label_id: str) -> None:
        self._require(Capability.DELETE_LABEL)
        self.proxy_request("DELETE", f"/accounts/{account_id}/labels/{label_id}")

    # ── Messages ───────────────────────────────────────────────────────────────

    def list_emails(
        self,
        account_id: str,
        folder_id: str,
        *,
        limit: int = 50,
        start: int | None = None,
        unread_only: bool = False,
        flagged_only: bool = False,
    ) -> list[Email]:
        self._require(Capability.LIST_EMAILS)
        query = {"folderId": folder_id, "limit": str(limit)}
        if start:
            query["start"] = str(start)
        if unread_only:
            query["status"] = "0"
        if flagged_only:
            query["flagid"] = "flagged"
        data = self.proxy_request("GET", f"/accounts/{account_id}/messages/view", query=query)
        return [Email.from_api(e) for e in _records(data, "messages")]

    def search_emails(
        self,
        account_id: str,
        search_key: str,
        *,
        limit: int = 50,
        start: int | None = None,
        folder_id: str | None = None,
    ) -> list[Email]:
        self._require(Capability.SEARCH_EMAILS)
        if not search_key:
            raise ValidationError("Search query is required")
        query = {"searchKey": search_key, "limit": str(limit)}
        if start:
            query["start"] = str(start)
        if folder_id:
            query["folderId"] = folder_id
        data = self.proxy_request("GET", f"/accounts/{account_id}/messages/search", query=query)
        return [Email.from_api(e) for e in _records(data, "messages")]

    def get_email_content(self, account_id: str, folder_id: str, message_id: str) -> EmailContent:
        self._require(Capability.READ_EMAIL)
        data = self.proxy_request(
            "GET", f"/accounts/{account_id}/folders/{folder_id}/messages/{message_id}/content"
        )
        return EmailContent.from_api(_record(data, "message content"))

    def send_email(
        self,
        account_id: str,
        *,
        to: str | None,
        subject: str | None,
        content: str | None,
        cc: str | None = None,
        bcc: str | None = None,
        html: bool = False,
        attachments: list[str] | None = None,
    ) -> Any:
        """Send a message. Validation runs before the capability gate so bad
        input is reported the same way on every transport."""
        for flag, value in (("--to", to), ("--subject", subject), ("--body", content)):
            if not value:
                raise ValidationError(f"{flag} is required")
        if attachments:
            self._require(Capability.ATTACHMENTS)
        self._require(Capability.SEND_EMAIL)

        body: dict[str, Any] = {
            "toAddress": to,
            "subject": subject,
            "content": content,
            "mailFormat": "html" if html else "plaintext",
        }
        if cc:
            body["ccAddress"] = cc
        if bcc:
            body["bccAddress"] = bcc
        return self.proxy_request("POST", f"/accounts/{account_id}/messages", body=body)

    def update_message(
        self,
        account_id: str,
        message_ids: str | list[str],
        mode: UpdateMode,
        *,
        folder_id: str | None = None,
        tag_id: str | None = None,
    ) -> None:
        """Apply exactly one action (read/flag/move/tag/archive/spam...) to messages."""
        self._require(Capability.UPDATE_MESSAGE)
        ids = [message_ids] if isinstance(message_ids, str) else list(message_ids)
        body = self._update_body(mode, folder_id, tag_id)
        body["messageId"] = ids
        self.proxy_request("PUT", f"/accounts/{account_id}/updatemessage", body=body)

    def update_thread(
        self,
        account_id: str,
        thread_ids: str | list[str],
        mode: UpdateMode,
        *,
        folder_id: str | None = None,
        tag_id: str | None = None,
    ) -> None:
        self._require(Capability.UPDATE_THREAD)
        ids = [thread_ids] if isinstance(thread_ids, str) else list(thread_ids)
        body = self._update_body(mode, folder_id, tag_id)
        body["threadId"] = ids
        self.proxy_request("PUT", f"/accounts/{account_id}/updatethread", body=body)

    def delete_email(self, account_id: str, folder_id: str, message_id: str) -> None:
        self._require(Capability.DELETE_EMAIL)
        self.proxy_request(
            "DELETE", f"/accounts/{account_id}/folders/{folder_id}/messages/{message_id}"
        )

    # ── Core primitive ─────────────────────────────────────────────────────────

    def proxy_request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one request and return the envelope's ``data``.

        Raises ApiError (non-200), TransportError (no envelope) or
        ProcessError (from the transport). Retries only on 429.
        """
        attempt = 0
        while True:
            raw = self._transport.request(method, path, query, body)
            try:
                return self._unwrap(raw.text)
            except ApiError as exc:
                attempt += 1
                if exc.code != _RATE_LIMITED or attempt >= self._max_attempts:
                    logger.debug("%s %s failed: %s", method, path, exc)
                    raise
                delay = self._backoff * 2 ** (attempt - 1)
                logger.warning(
                    "Rate limited on %s %s (attempt %d/%d); retrying in %.1fs",
                    method, path, attempt, self._max_attempts, delay,
                )
                self._sleep(delay)

    # ── Internal helpers ───────────────────────────────────────────────────────

    def _require(self, capability: Capability) -> None:
        if capability not in self._transport.capabilities:
            raise CapabilityNotSupported(capability.value, transport=self._transport.name)

    def _update_folder(self, account_id: str, folder_id: str, body: dict[str, Any]) -> Any:
        self._require(Capability.UPDATE_FOLDER)
        return self.proxy_request("PUT", f"/accounts/{account_id}/folders/{folder_id}", body=body)

    @staticmethod
    def _update_body(
        mode: UpdateMode, folder_id: str | None, tag_id: str | None
    ) -> dict[str, Any]:
        try:
            mode = UpdateMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown update mode: {mode!r}") from None
        body: dict[str, Any] = {"mode": mode.value}
        if mode in FOLDER_MODES:
            if not folder_id:
                raise ValidationError(f"{mode.value} requires a destination folder id")
            body["destFolderId"] = folder_id
        if mode in TAG_MODES:
            if not tag_id:
                raise ValidationError(f"{mode.value} requires a label id")
            body["tagId"] = tag_id
        return body

    @staticmethod
    def _unwrap(text: str) -> Any:
        envelope = extract_json_block(text)
        if envelope is None:
            raise TransportError("No JSON response from API")
        status = envelope.get("status")
        if not isinstance(status, dict) or "code" not in status:
            raise TransportError(f"Malformed response envelope: {json.dumps(envelope)[:200]}")
        try:
            code = int(status["code"])
        except (TypeError, ValueError):
            raise TransportError(f"Non-numeric status code: {status['code']!r}") from None
        if code != 200:
            data = envelope.get("data")
            description = str(status.get("description") or "")
            if isinstance(data, dict) and data.get("moreInfo"):
                description = f"{description} ({data['moreInfo']})" if description else str(data["moreInfo"])
            raise ApiError(description or f"status {code}", code=code)
        return envelope.get("data")
