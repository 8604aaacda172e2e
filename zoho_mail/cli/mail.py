"""``mail`` commands — list, read, search, send and per-message actions."""

from __future__ import annotations

import click
from rich.markup import escape

from zoho_mail.cli.common import AppContext, authenticated, confirm_or_warn, json_option, reporting
from zoho_mail.output.formatter import (
    OutputFormat,
    console,
    email_content_panel,
    render,
    render_json,
    success,
)
from zoho_mail.pdauth.types import UpdateMode


@click.group()
def mail() -> None:
    """Email operations."""


def _apply(
    app: AppContext,
    account_id: str,
    message_id: str,
    mode: UpdateMode,
    done: str,
    *,
    folder_id: str | None = None,
    tag_id: str | None = None,
) -> None:
    app.client.update_message(account_id, message_id, mode, folder_id=folder_id, tag_id=tag_id)
    success(done)


# ── Reading ────────────────────────────────────────────────────────────────────


@mail.command("list")
@click.argument("folder_id", required=False)
@click.option(
    "-n", "--limit", type=click.IntRange(min=1), default=20, show_default=True, help="Max emails to fetch."
)
@click.option("--start", type=int, default=None, help="Pagination offset (1-based).")
@click.option("--unread", is_flag=True, help="Only unread emails.")
@click.option("--flagged", is_flag=True, help="Only flagged emails.")
@click.option("--from", "sender", default=None, help="Filter by sender (substring).")
@click.option("--subject", default=None, help="Filter by subject (substring).")
@json_option
@authenticated("Failed to fetch emails")
def list_emails(
    app: AppContext,
    account_id: str,
    folder_id: str | None,
    limit: int,
    start: int | None,
    unread: bool,
    flagged: bool,
    sender: str | None,
    subject: str | None,
    as_json: bool,
) -> None:
    """List emails in a folder (default: the configured default folder)."""
    target = app.resolve_folder_id(account_id, folder_id)
    emails = app.client.list_emails(
        account_id, target, limit=limit, start=start, unread_only=unread, flagged_only=flagged
    )
    if sender:
        emails = [e for e in emails if sender.lower() in e.from_address.lower()]
    if subject:
        emails = [e for e in emails if subject.lower() in e.subject.lower()]

    fmt = app.output_format(as_json)
    if not emails:
        if fmt is OutputFormat.JSON:
            render([], fmt)
        else:
            console.print("[dim]No emails found[/dim]")
        return
    render(emails, fmt)
    if fmt is OutputFormat.TABLE:
        console.print(f"\n[dim]Showing {len(emails)} email(s)[/dim]")


@mail.command()
@click.argument("message_id")
@click.option("--folder", "folder_id", default=None, help="Folder ID containing the email.")
@json_option
@authenticated("Failed to fetch email")
def read(app: AppContext, account_id: str, message_id: str, folder_id: str | None, as_json: bool) -> None:
    """Show the content of an email."""
    target = app.resolve_folder_id(account_id, folder_id)
    content = app.client.get_email_content(account_id, target, message_id)
    if app.output_format(as_json) is OutputFormat.TABLE:
        console.print(email_content_panel(content))
    else:
        click.echo(render_json(content))


@mail.command()
@click.argument("query")
@click.option(
    "-n", "--limit", type=click.IntRange(min=1), default=50, show_default=True, help="Max results."
)
@click.option("--start", type=int, default=None, help="Pagination offset (1-based).")
@click.option("--folder", "folder_id", default=None, help="Search in a specific folder.")
@json_option
@authenticated("Search failed")
def search(
    app: AppContext,
    account_id: str,
    query: str,
    limit: int,
    start: int | None,
    folder_id: str | None,
    as_json: bool,
) -> None:
    """Search emails with a Zoho search key."""
    emails = app.client.search_emails(account_id, query, limit=limit, start=start, folder_id=folder_id)
    fmt = app.output_format(as_json)
    if not emails and fmt is not OutputFormat.JSON:
        console.print("[dim]No emails found[/dim]")
        return
    render(emails, fmt)
    if fmt is OutputFormat.TABLE:
        console.print(f"\n[dim]Found {len(emails)} email(s)[/dim]")


# ── Sending ────────────────────────────────────────────────────────────────────


@mail.command()
@click.option("--to", default=None, help="Recipient address (required).")
@click.option("--cc", default=None, help="CC recipient.")
@click.option("--bcc", default=None, help="BCC recipient.")
@click.option("--subject", default=None, help="Subject (required).")
@click.option("--body", default=None, help="Body text (required).")
@click.option("--html", is_flag=True, help="Treat the body as HTML.")
@click.option("--attach", "attachments", multiple=True, help="Attachment path.")
@authenticated("Failed to send email")
def send(
    app: AppContext,
    account_id: str,
    to: str | None,
    cc: str | None,
    bcc: str | None,
    subject: str | None,
    body: str | None,
    html: bool,
    attachments: tuple[str, ...],
) -> None:
    """Send an email."""
    app.client.send_email(
        account_id,
        to=to,
        subject=subject,
        content=body,
        cc=cc,
        bcc=bcc,
        html=html,
        attachments=list(attachments),
    )
    success(f"Email sent to {escape(to or '')}")


# ── Per-message actions ────────────────────────────────────────────────────────


@mail.command()
@click.argument("message_id")
@click.argument("folder_id")
@authenticated("Failed to move email")
def move(app: AppContext, account_id: str, message_id: str, folder_id: str) -> None:
    """Move an email to another folder."""
    _apply(app, account_id, message_id, UpdateMode.MOVE_TO_FOLDER, "Email moved", folder_id=folder_id)


@mail.command()
@click.argument("message_id")
@click.option("--folder", "folder_id", default=None, help="Folder containing the email.")
@click.option("--force", is_flag=True, help="Skip confirmation.")
@click.pass_obj
def delete(app: AppContext, message_id: str, folder_id: str | None, force: bool) -> None:
    """Delete an email."""
    if not confirm_or_warn(force, f"About to delete email: {message_id}", "The email will be moved to Trash."):
        return
    with reporting("Failed to delete email"):
        account_id = app.connect()
        target = app.resolve_folder_id(account_id, folder_id)
        app.client.delete_email(account_id, target, message_id)
    success("Email deleted")


@mail.command()
@click.argument("message_id")
@authenticated("Failed to flag email")
def flag(app: AppContext, account_id: str, message_id: str) -> None:
    """Flag an email."""
    _apply(app, account_id, message_id, UpdateMode.ADD_FLAG, "Email flagged")


@mail.command()
@click.argument("message_id")
@authenticated("Failed to remove flag")
def unflag(app: AppContext, account_id: str, message_id: str) -> None:
    """Remove the flag from an email."""
    _apply(app, account_id, message_id, UpdateMode.REMOVE_FLAG, "Flag removed")


@mail.command()
@click.argument("message_id")
@click.option("--undo", is_flag=True, help="Unarchive instead.")
@authenticated("Failed to archive email")
def archive(app: AppContext, account_id: str, message_id: str, undo: bool) -> None:
    """Archive an email."""
    if undo:
        _apply(app, account_id, message_id, UpdateMode.UNARCHIVE, "Email unarchived")
    else:
        _apply(app, account_id, message_id, UpdateMode.ARCHIVE, "Email archived")


@mail.command()
@click.argument("message_id")
@authenticated("Failed to mark as spam")
def spam(app: AppContext, account_id: str, message_id: str) -> None:
    """Mark an email as spam."""
    _apply(app, account_id, message_id, UpdateMode.SPAM, "Marked as spam")


@mail.command()
@click.argument("message_id")
@authenticated("Failed to unmark spam")
def unspam(app: AppContext, account_id: str, message_id: str) -> None:
    """Mark an email as not spam."""
    _apply(app, account_id, message_id, UpdateMode.NOT_SPAM, "Unmarked as spam")


@mail.command("mark-read")
@click.argument("message_id")
@authenticated("Failed to mark as read")
def mark_read(app: AppContext, account_id: str, message_id: str) -> None:
    """Mark an email as read."""
    _apply(app, account_id, message_id, UpdateMode.MARK_AS_READ, "Marked as read")


@mail.command("mark-unread")
@click.argument("message_id")
@authenticated("Failed to mark as unread")
def mark_unread(app: AppContext, account_id: str, message_id: str) -> None:
    """Mark an email as unread."""
    _apply(app, account_id, message_id, UpdateMode.MARK_AS_UNREAD, "Marked as unread")


@mail.command()
@click.argument("message_id")
@click.argument("label_id")
@authenticated("Failed to apply label")
def label(app: AppContext, account_id: str, message_id: str, label_id: str) -> None:
    """Apply a label to an email."""
    _apply(app, account_id, message_id, UpdateMode.ADD_TAG, "Label applied", tag_id=label_id)


@mail.command()
@click.argument("message_id")
@click.argument("label_id")
@authenticated("Failed to remove label")
def unlabel(app: AppContext, account_id: str, message_id: str, label_id: str) -> None:
    """Remove a label from an email."""
    _apply(app, account_id, message_id, UpdateMode.REMOVE_TAG, "Label removed", tag_id=label_id)
