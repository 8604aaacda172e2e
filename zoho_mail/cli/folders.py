"""``folders`` commands."""

from __future__ import annotations

import click
from rich.markup import escape

from zoho_mail.cli.common import AppContext, authenticated, confirm_or_warn, json_option, reporting
from zoho_mail.output.formatter import OutputFormat, console, render, render_json, success


@click.group()
def folders() -> None:
    """Manage email folders."""


@folders.command("list")
@click.option("-n", "--limit", type=click.IntRange(min=1), default=None, help="Max folders to show.")
@click.option("--start", type=int, default=None, help="Pagination offset (1-based).")
@json_option
@authenticated("Failed to fetch folders")
def list_folders(app: AppContext, account_id: str, limit: int | None, start: int | None, as_json: bool) -> None:
    """List all folders."""
    render(app.client.list_folders(account_id, limit=limit, start=start), app.output_format(as_json))


@folders.command()
@click.argument("name")
@click.option("--parent", "parent_id", default=None, help="Parent folder ID (for subfolders).")
@json_option
@authenticated("Failed to create folder")
def create(app: AppContext, account_id: str, name: str, parent_id: str | None, as_json: bool) -> None:
    """Create a folder."""
    folder = app.client.create_folder(account_id, name, parent_id)
    if app.output_format(as_json) is OutputFormat.JSON:
        click.echo(render_json(folder))
        return
    success(f"Created folder: {escape(folder.folder_name)}")
    console.print(f"  [dim]Folder ID:[/dim] {escape(folder.folder_id)}")
    if folder.path:
        console.print(f"  [dim]Path:[/dim] {escape(folder.path)}")


@folders.command()
@click.argument("folder_id")
@click.option("--force", is_flag=True, help="Skip confirmation.")
@click.pass_obj
def delete(app: AppContext, folder_id: str, force: bool) -> None:
    """Delete a folder and every email in it."""
    if not confirm_or_warn(
        force,
        f"About to delete folder: {folder_id}",
        "This will permanently delete the folder and all emails in it.",
    ):
        return
    with reporting("Failed to delete folder"):
        account_id = app.connect()
        app.client.delete_folder(account_id, folder_id)
    success("Folder deleted")


@folders.command()
@click.argument("folder_id")
@click.argument("new_name")
@authenticated("Failed to rename folder")
def rename(app: AppContext, account_id: str, folder_id: str, new_name: str) -> None:
    """Rename a folder."""
    folder = app.client.rename_folder(account_id, folder_id, new_name)
    success(f"Folder renamed to: {escape(folder.folder_name)}")


@folders.command()
@click.argument("folder_id")
@click.argument("parent_id")
@authenticated("Failed to move folder")
def move(app: AppContext, account_id: str, folder_id: str, parent_id: str) -> None:
    """Move a folder under a new parent."""
    app.client.move_folder(account_id, folder_id, parent_id)
    success("Folder moved")


@folders.command()
@click.argument("folder_id")
@click.option("--force", is_flag=True, help="Skip confirmation.")
@click.pass_obj
def empty(app: AppContext, folder_id: str, force: bool) -> None:
    """Delete every email in a folder."""
    if not confirm_or_warn(
        force,
        f"About to empty folder: {folder_id}",
        "This will permanently delete all emails in the folder.",
    ):
        return
    with reporting("Failed to empty folder"):
        account_id = app.connect()
        app.client.empty_folder(account_id, folder_id)
    success("Folder emptied")


@folders.command("mark-read")
@click.argument("folder_id")
@authenticated("Failed to mark folder as read")
def mark_read(app: AppContext, account_id: str, folder_id: str) -> None:
    """Mark every email in a folder as read."""
    app.client.mark_folder_read(account_id, folder_id)
    success("Folder marked as read")
