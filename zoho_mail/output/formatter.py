"""Output Formatter — tables, JSON and compact lines for Zoho records.

Only the display derivations (folder icons, read/flag/attachment glyphs,
label colour swatches) carry any logic; rendering itself is rich.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

import click
from rich import box
from rich.color import Color, ColorParseError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from zoho_mail.pdauth.types import Account, Email, EmailContent, Folder, Label

console = Console(width=200)
err_console = Console(stderr=True, width=200)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    COMPACT = "compact"


FOLDER_ICONS: dict[str, str] = {
    "Inbox": "📥",
    "Sent": "📤",
    "Drafts": "📝",
    "Trash": "🗑️",
    "Spam": "🚫",
    "Outbox": "📬",
    "Templates": "📋",
    "Snoozed": "⏰",
}
_DEFAULT_FOLDER_ICON = "📁"

UNREAD_GLYPH = "●"
FLAG_GLYPH = "⭐"
ATTACHMENT_GLYPH = "📎"


# ── Display derivations ────────────────────────────────────────────────────────


def folder_icon(folder_type: str) -> str:
    return FOLDER_ICONS.get(folder_type, _DEFAULT_FOLDER_ICON)


def email_status_icons(email: Email) -> str:
    """Unread dot, flag star and paperclip, in that order; "-" when none apply."""
    icons = ""
    if not email.is_read:
        icons += UNREAD_GLYPH
    if email.is_flagged:
        icons += FLAG_GLYPH
    if email.has_attachment:
        icons += ATTACHMENT_GLYPH
    return icons or "-"


def label_swatch(color: str) -> str:
    """A coloured square in rich markup, or "-" for a missing/unparseable colour."""
    if not color:
        return "-"
    try:
        Color.parse(color)
    except ColorParseError:
        return escape(color)
    return f"[{color}]■[/{color}]"


def format_timestamp(millis: int | None) -> str:
    if millis is None:
        return "-"
    try:
        return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return "-"


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


# ── Rendering ──────────────────────────────────────────────────────────────────


def to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def render_json(value: Any, *, compact: bool = False) -> str:
    if compact:
        return json.dumps(to_jsonable(value), separators=(",", ":"), ensure_ascii=False)
    return json.dumps(to_jsonable(value), indent=2, ensure_ascii=False)


def _table(*headers: str) -> Table:
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    for header in headers:
        table.add_column(header)
    return table


def accounts_table(accounts: Sequence[Account]) -> Table:
    table = _table("Account ID", "Email", "Display Name", "Type")
    for a in accounts:
        table.add_row(a.account_id, a.email_address, a.display_name or "-", a.type or "-")
    return table


def folders_table(folders: Sequence[Folder]) -> Table:
    table = _table("Folder ID", "Name", "Type", "Path", "Unread")
    for f in folders:
        table.add_row(
            f.folder_id,
            f"{folder_icon(f.folder_type)} {escape(f.folder_name)}",
            f.folder_type or "-",
            escape(f.path) or "-",
            str(f.unread_count) if f.unread_count is not None else "-",
        )
    return table


def labels_table(labels: Sequence[Label]) -> Table:
    table = _table("Label ID", "Name", "Color")
    for lbl in labels:
        table.add_row(lbl.label_id, escape(lbl.label_name), label_swatch(lbl.color))
    return table


def emails_table(emails: Sequence[Email]) -> Table:
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("ID", width=20, no_wrap=True)
    table.add_column("From", max_width=25)
    table.add_column("Subject", max_width=40)
    table.add_column("Date", width=16)
    table.add_column("Status", width=8)
    for e in emails:
        style = "bold" if not e.is_read else ""
        table.add_row(
            e.message_id,
            escape(truncate(e.from_address, 25)),
            escape(truncate(e.subject or "(no subject)", 40)),
            format_timestamp(e.received_time),
            email_status_icons(e),
            style=style,
        )
    return table


def _compact_line(record: Any) -> str:
    if isinstance(record, Account):
        fields = [record.account_id, record.email_address, record.display_name]
    elif isinstance(record, Folder):
        fields = [record.folder_id, record.folder_type, record.path or record.folder_name]
    elif isinstance(record, Label):
        fields = [record.label_id, record.label_name, record.color]
    elif isinstance(record, Email):
        fields = [
            record.message_id,
            format_timestamp(record.received_time),
            email_status_icons(record),
            record.from_address,
            record.subject,
        ]
    else:
        return render_json(record, compact=True)
    return "\t".join(fields)


_TABLES = {
    Account: accounts_table,
    Folder: folders_table,
    Label: labels_table,
    Email: emails_table,
}


def render(
    records: Sequence[Any],
    fmt: OutputFormat | str = OutputFormat.TABLE,
    *,
    out: Console | None = None,
) -> None:
    """Print ``records`` (all of one type) in the requested format."""
    fmt = OutputFormat(fmt)
    if fmt is OutputFormat.JSON:
        click.echo(render_json(list(records)))
        return
    if fmt is OutputFormat.COMPACT:
        for record in records:
            click.echo(_compact_line(record))
        return
    if not records:
        return
    builder = _TABLES.get(type(records[0]))
    if builder is None:
        click.echo(render_json(list(records)))
        return
    (out or console).print(builder(records))


def email_content_panel(content: EmailContent, summary: Email | None = None) -> Panel:
    """Header block plus body for ``mail read``."""
    subject = content.subject or (summary.subject if summary else "") or "(no subject)"
    sender = content.from_address or (summary.from_address if summary else "")
    received = content.received_time or (summary.received_time if summary else None)
    lines = [f"[bold]From:[/bold] {escape(sender or '-')}"]
    if content.to_address:
        lines.append(f"[bold]To:[/bold] {escape(content.to_address)}")
    if content.cc_address:
        lines.append(f"[bold]Cc:[/bold] {escape(content.cc_address)}")
    lines.append(f"[bold]Date:[/bold] {format_timestamp(received)}")
    lines.append(f"[bold]Subject:[/bold] {escape(subject)}")
    body = content.content or (summary.summary if summary else "") or "(no content)"
    return Panel(
        "\n".join(lines) + "\n\n" + escape(body),
        title=f"[dim]{escape(content.message_id)}[/dim]",
        border_style="blue",
    )


# ── Status lines ───────────────────────────────────────────────────────────────


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def warn(message: str) -> None:
    err_console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    err_console.print(f"[red]✗[/red] {message}")
