"""Value records for Zoho Mail API responses, plus update modes and capabilities.

Every record is built through a ``from_api`` classmethod so that the
inconsistent encodings Zoho uses (``"0"``/``"1"`` strings, booleans,
``"true"``/``"false"``, millisecond timestamps as strings) are normalised
here and never leak past the API client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# flagid values meaning "not flagged"
_UNFLAGGED = {"", "0", "flag_not_set", "none"}


def as_bool(value: Any) -> bool:
    """Normalise Zoho's boolean encodings: True, "1", "true" → True.

    The integer 1 is also accepted: some endpoints send JSON numbers where
    others send the string "1". Every other value (2, 1.0, "yes", None) is False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return False


def as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _str(value: Any) -> str:
    return "" if value is None else str(value)


class UpdateMode(str, Enum):
    """Actions accepted by the updatemessage / updatethread endpoints."""

    MARK_AS_READ = "markAsRead"
    MARK_AS_UNREAD = "markAsUnread"
    MOVE_TO_FOLDER = "moveToFolder"
    ADD_FLAG = "addFlag"
    REMOVE_FLAG = "removeFlag"
    ADD_TAG = "addTag"
    REMOVE_TAG = "removeTag"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"
    SPAM = "spam"
    NOT_SPAM = "notSpam"


#: Modes that need a destination folder id.
FOLDER_MODES: frozenset[UpdateMode] = frozenset({UpdateMode.MOVE_TO_FOLDER})

#: Modes that need a label (tag) id.
TAG_MODES: frozenset[UpdateMode] = frozenset({UpdateMode.ADD_TAG, UpdateMode.REMOVE_TAG})


class Capability(str, Enum):
    """Logical operations a transport may or may not be able to carry."""

    LIST_ACCOUNTS = "list accounts"
    LIST_FOLDERS = "list folders"
    CREATE_FOLDER = "create folder"
    UPDATE_FOLDER = "update folder"
    DELETE_FOLDER = "delete folder"
    LIST_LABELS = "list labels"
    CREATE_LABEL = "create label"
    UPDATE_LABEL = "update label"
    DELETE_LABEL = "delete label"
    LIST_EMAILS = "list emails"
    SEARCH_EMAILS = "search emails"
    READ_EMAIL = "read email"
    SEND_EMAIL = "send email"
    UPDATE_MESSAGE = "update message"
    DELETE_EMAIL = "delete email"
    UPDATE_THREAD = "update thread"
    ATTACHMENTS = "attachments"


#: Everything the structured REST proxy can reach (attachments need multipart upload).
REST_CAPABILITIES: frozenset[Capability] = frozenset(Capability) - {Capability.ATTACHMENTS}


# ── Records ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Account:
    account_id: str
    email_address: str
    display_name: str = ""
    type: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Account:
        return cls(
            account_id=_str(data.get("accountId")),
            email_address=_str(data.get("emailAddress") or data.get("primaryEmailAddress")),
            display_name=_str(data.get("displayName")),
            type=_str(data.get("type")),
        )


@dataclass(frozen=True)
class Folder:
    folder_id: str
    folder_name: str
    folder_type: str = ""
    path: str = ""
    unread_count: int | None = None
    total_count: int | None = None
    parent_folder_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Folder:
        parent = data.get("parentFolderId") or data.get("previousFolderId")
        return cls(
            folder_id=_str(data.get("folderId")),
            folder_name=_str(data.get("folderName")),
            folder_type=_str(data.get("folderType")),
            path=_str(data.get("path")),
            unread_count=as_int(data.get("unreadCount")),
            total_count=as_int(data.get("totalCount") or data.get("messageCount")),
            parent_folder_id=_str(parent) if parent else None,
        )


@dataclass(frozen=True)
class Label:
    label_id: str
    label_name: str
    color: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Label:
        return cls(
            label_id=_str(data.get("labelId") or data.get("tagId")),
            label_name=_str(data.get("labelName") or data.get("displayName")),
            color=_str(data.get("color")),
        )


@dataclass(frozen=True)
class Email:
    """A message summary from the list / search endpoints.

    ``status`` is "0" (unread) / "1" (read) on the wire; ``status2`` is a
    second read marker some endpoints send. Either one being unread wins.
    """

    message_id: str
    folder_id: str
    subject: str
    from_address: str
    to_address: str = ""
    received_time: int | None = None
    is_read: bool = False
    is_flagged: bool = False
    has_attachment: bool = False
    summary: str = ""
    thread_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Email:
        status2 = data.get("status2")
        is_read = as_bool(data.get("status")) and (status2 is None or as_bool(status2))
        flag = _str(data.get("flagid")).strip().lower()
        thread = data.get("threadId")
        return cls(
            message_id=_str(data.get("messageId")),
            folder_id=_str(data.get("folderId")),
            subject=_str(data.get("subject")),
            from_address=_str(data.get("fromAddress") or data.get("sender")),
            to_address=_str(data.get("toAddress")),
            received_time=as_int(data.get("receivedTime")),
            is_read=is_read,
            is_flagged=flag not in _UNFLAGGED,
            has_attachment=as_bool(data.get("hasAttachment")),
            summary=_str(data.get("summary")),
            thread_id=_str(thread) if thread else None,
        )


@dataclass(frozen=True)
class EmailContent:
    message_id: str
    content: str
    folder_id: str = ""
    subject: str = ""
    from_address: str = ""
    to_address: str = ""
    cc_address: str = ""
    received_time: int | None = None
    has_attachment: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EmailContent:
        return cls(
            message_id=_str(data.get("messageId")),
            content=_str(data.get("content") or data.get("htmlContent")),
            folder_id=_str(data.get("folderId")),
            subject=_str(data.get("subject")),
            from_address=_str(data.get("fromAddress")),
            to_address=_str(data.get("toAddress")),
            cc_address=_str(data.get("ccAddress")),
            received_time=as_int(data.get("receivedTime")),
            has_attachment=as_bool(data.get("hasAttachment")),
        )


@dataclass(frozen=True)
class ConnectionStatus:
    """Result of a connection probe; derived fresh on every check."""

    connected: bool
    account_name: str
    healthy: bool
    account_id: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
